from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


class FailureReason(str, enum.Enum):
    MALFORMED_ARGUMENT = "malformed_argument"
    DUPLICATE_FLAG = "duplicate_flag"
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True, slots=True)
class Failure:
    """Typed reason for an aborted parse/resolve step."""

    reason: FailureReason
    message: str
    subject: str | None = None


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Outcome of a bootstrap step: either a value or a failure, never both."""

    value: T | None = None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, failure: Failure) -> Result[T]:
        return cls(failure=failure)

    def unwrap(self) -> T:
        if self.failure is not None:
            raise ValueError(f"unwrap() on failed result: {self.failure.message}")
        return self.value  # type: ignore[return-value]
