from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass

from stableui.core.errors import StableUIError
from stableui.runtime.cancellation import CancellationSignal


logger = logging.getLogger(__name__)

DEFAULT_LOCAL_USER_ID = "local"


@dataclass(frozen=True, slots=True)
class Session:
    id: str
    user_id: str
    created_at: float


class SessionHandler:
    """Tracks client sessions for the web API."""

    def __init__(self, cancel: CancellationSignal, *, local_user_id: str = DEFAULT_LOCAL_USER_ID) -> None:
        self.cancel = cancel
        self.local_user_id = local_user_id
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._shut_down = False

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create_session(self, user_id: str | None = None) -> Session:
        if self.cancel.cancelled:
            raise StableUIError("Server is shutting down; no new sessions")
        session = Session(
            id=secrets.token_hex(16),
            user_id=user_id or self.local_user_id,
            created_at=time.time(),
        )
        with self._lock:
            if self._shut_down:
                raise StableUIError("Session handler is shut down")
            self._sessions[session.id] = session
        return session

    def get_session(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def shutdown(self) -> None:
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
            count = len(self._sessions)
            self._sessions.clear()
        logger.info("sessions_closed", extra={"count": count})
