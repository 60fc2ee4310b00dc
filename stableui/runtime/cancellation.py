from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable


logger = logging.getLogger(__name__)

CancelCallback = Callable[[], None]


class CancellationSignal:
    """Write-once broadcast flag.

    Observers may poll `cancelled`, block in `wait()`, await `wait_async()`,
    or register a callback. A callback registered after the signal fired runs
    immediately, so late observers never miss it.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[CancelCallback] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """Fire the signal. Returns True only for the call that fired it."""

        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        for cb in callbacks:
            self._invoke(cb)
        return True

    def add_callback(self, cb: CancelCallback) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(cb)
                return
        self._invoke(cb)

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    async def wait_async(self) -> None:
        if self.cancelled:
            return
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            if not fut.done():
                fut.set_result(None)

        self.add_callback(lambda: loop.call_soon_threadsafe(_wake))
        await fut

    @staticmethod
    def _invoke(cb: CancelCallback) -> None:
        try:
            cb()
        except Exception:  # noqa: BLE001
            logger.exception("cancel_callback_failed")
