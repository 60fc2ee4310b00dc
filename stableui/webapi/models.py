"""Basic API request and response models."""

from __future__ import annotations

from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Server status.

    Attributes:
        environment: Resolved environment mode.
        bind_url: Address the service layer listens on.
        backends: Number of registered compute backends.
        sessions: Number of live client sessions.
        shutting_down: Whether the cancellation signal has fired.
    """

    environment: str
    bind_url: str
    backends: int
    sessions: int
    shutting_down: bool


class SessionResponse(BaseModel):
    session_id: str
    user_id: str


class ShutdownResponse(BaseModel):
    """Result of an administrative stop request.

    Attributes:
        initiated: True only if this request ran the shutdown sequence.
    """

    initiated: bool
