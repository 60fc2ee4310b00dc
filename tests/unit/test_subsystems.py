from __future__ import annotations

import pytest

from stableui.accounts.sessions import DEFAULT_LOCAL_USER_ID, SessionHandler
from stableui.backends.handler import BackendHandler, BackendStatus
from stableui.core.errors import StableUIError
from stableui.runtime.cancellation import CancellationSignal


def test_backends_load_and_shutdown_idempotent() -> None:
    backends = BackendHandler(CancellationSignal())
    backends.load()

    assert [b.type for b in backends.backends] == ["local"]
    assert all(b.status is BackendStatus.RUNNING for b in backends.backends)

    backends.shutdown()
    backends.shutdown()

    assert backends.is_shut_down
    assert all(b.status is BackendStatus.STOPPED for b in backends.backends)


def test_backend_ids_are_unique() -> None:
    backends = BackendHandler(CancellationSignal(), default_backends=[])
    a = backends.add_backend("comfy", {"port": 8188})
    b = backends.add_backend("comfy")
    assert a.id != b.id
    assert a.status is BackendStatus.WAITING


def test_sessions_default_user() -> None:
    sessions = SessionHandler(CancellationSignal())
    session = sessions.create_session()
    assert session.user_id == DEFAULT_LOCAL_USER_ID
    assert sessions.get_session(session.id) == session
    assert sessions.create_session(user_id="bob").user_id == "bob"
    assert len(sessions) == 2


def test_sessions_shutdown_clears() -> None:
    sessions = SessionHandler(CancellationSignal(), local_user_id="alice")
    s = sessions.create_session()

    sessions.shutdown()
    sessions.shutdown()

    assert sessions.is_shut_down
    assert sessions.get_session(s.id) is None
    with pytest.raises(StableUIError):
        sessions.create_session()


def test_sessions_refuse_after_cancel() -> None:
    cancel = CancellationSignal()
    sessions = SessionHandler(cancel)
    cancel.cancel()
    with pytest.raises(StableUIError):
        sessions.create_session()
