from __future__ import annotations

from stableui.accounts.sessions import DEFAULT_LOCAL_USER_ID, Session, SessionHandler

__all__ = ["DEFAULT_LOCAL_USER_ID", "Session", "SessionHandler"]
