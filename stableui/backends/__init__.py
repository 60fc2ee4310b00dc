from __future__ import annotations

from stableui.backends.handler import BackendData, BackendHandler, BackendStatus

__all__ = ["BackendData", "BackendHandler", "BackendStatus"]
