from __future__ import annotations

import asyncio
import threading

from stableui.runtime.cancellation import CancellationSignal


def test_initially_not_cancelled() -> None:
    sig = CancellationSignal()
    assert sig.cancelled is False
    assert sig.wait(timeout=0) is False


def test_cancel_is_one_shot() -> None:
    sig = CancellationSignal()
    assert sig.cancel() is True
    assert sig.cancel() is False
    assert sig.cancelled is True
    assert sig.wait(timeout=0) is True


def test_callbacks_run_once_on_cancel() -> None:
    sig = CancellationSignal()
    calls: list[str] = []
    sig.add_callback(lambda: calls.append("a"))
    sig.add_callback(lambda: calls.append("b"))

    sig.cancel()
    sig.cancel()

    assert calls == ["a", "b"]


def test_late_callback_runs_immediately() -> None:
    sig = CancellationSignal()
    sig.cancel()

    calls: list[int] = []
    sig.add_callback(lambda: calls.append(1))
    assert calls == [1]


def test_failing_callback_does_not_stop_others() -> None:
    sig = CancellationSignal()
    calls: list[int] = []

    def boom() -> None:
        raise RuntimeError("boom")

    sig.add_callback(boom)
    sig.add_callback(lambda: calls.append(1))
    sig.cancel()

    assert calls == [1]


def test_blocking_waiters_all_wake() -> None:
    sig = CancellationSignal()
    woke: list[bool] = []
    lock = threading.Lock()

    def waiter() -> None:
        result = sig.wait(timeout=5)
        with lock:
            woke.append(result)

    threads = [threading.Thread(target=waiter) for _ in range(8)]
    for t in threads:
        t.start()
    sig.cancel()
    for t in threads:
        t.join(timeout=5)

    assert woke == [True] * 8


def test_wait_async_wakes_from_other_thread() -> None:
    sig = CancellationSignal()

    async def scenario() -> None:
        waiter = asyncio.create_task(sig.wait_async())
        await asyncio.sleep(0)
        threading.Thread(target=sig.cancel).start()
        await asyncio.wait_for(waiter, timeout=5)

    asyncio.run(scenario())
    assert sig.cancelled


def test_wait_async_after_cancel_returns() -> None:
    sig = CancellationSignal()
    sig.cancel()
    asyncio.run(asyncio.wait_for(sig.wait_async(), timeout=1))
