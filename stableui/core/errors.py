from __future__ import annotations

from stableui.core.result import FailureReason


class StableUIError(Exception):
    """Base exception for this project."""


class InvalidInputError(StableUIError):
    """Raised when operator input (command line flags) is invalid.

    `subject` names the offending token, flag key or value.
    """

    def __init__(self, reason: FailureReason, message: str, *, subject: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.subject = subject


class ConfigError(StableUIError):
    """Raised when the settings document is unreadable or malformed."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
