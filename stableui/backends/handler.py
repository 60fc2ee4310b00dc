from __future__ import annotations

import enum
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from stableui.runtime.cancellation import CancellationSignal


logger = logging.getLogger(__name__)


class BackendStatus(str, enum.Enum):
    WAITING = "waiting"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(slots=True)
class BackendData:
    """A single registered compute backend."""

    id: int
    type: str
    settings: dict[str, Any] = field(default_factory=dict)
    status: BackendStatus = BackendStatus.WAITING


class BackendHandler:
    """Owns the set of compute backends for the process."""

    def __init__(self, cancel: CancellationSignal, *, default_backends: list[str] | None = None) -> None:
        self.cancel = cancel
        self._default_backends = list(default_backends) if default_backends is not None else ["local"]
        self._backends: dict[int, BackendData] = {}
        self._ids = itertools.count()
        self._lock = threading.Lock()
        self._shut_down = False

    @property
    def backends(self) -> list[BackendData]:
        with self._lock:
            return list(self._backends.values())

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def add_backend(self, type_name: str, settings: dict[str, Any] | None = None) -> BackendData:
        data = BackendData(id=next(self._ids), type=type_name, settings=dict(settings or {}))
        with self._lock:
            self._backends[data.id] = data
        return data

    def load(self) -> None:
        for type_name in self._default_backends:
            data = self.add_backend(type_name)
            data.status = BackendStatus.RUNNING
        logger.info("backends_loaded", extra={"count": len(self._backends)})

    def shutdown(self) -> None:
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
            backends = list(self._backends.values())

        for data in backends:
            data.status = BackendStatus.STOPPED
        logger.info("backends_stopped", extra={"count": len(backends)})
