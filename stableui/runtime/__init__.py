from __future__ import annotations

from stableui.runtime.cancellation import CancellationSignal
from stableui.runtime.shutdown import ShutdownGuard

__all__ = ["CancellationSignal", "ShutdownGuard"]
