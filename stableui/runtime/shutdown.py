from __future__ import annotations

import threading
from typing import Callable


class ShutdownGuard:
    """Lets exactly one caller run the shutdown sequence.

    The claim is a non-blocking lock acquisition that is never released, so
    concurrent callers race on a single atomic test-and-set.
    """

    def __init__(self) -> None:
        self._claim = threading.Lock()
        self._done = threading.Event()

    @property
    def claimed(self) -> bool:
        return self._claim.locked()

    @property
    def completed(self) -> bool:
        return self._done.is_set()

    def run_once(self, sequence: Callable[[], None]) -> bool:
        """Run `sequence` if this is the first call. Returns True for the winner only."""

        if not self._claim.acquire(blocking=False):
            return False
        try:
            sequence()
        finally:
            self._done.set()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the winning caller has finished its sequence."""

        return self._done.wait(timeout)
