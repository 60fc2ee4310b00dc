"""Command line flag table.

Grammar: every token is `--key`, optionally followed by a value token. A flag
immediately followed by another `--key` token (or by nothing) gets the value
"true". Keys are case-folded to lower case; duplicates are rejected.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from stableui.core.errors import InvalidInputError
from stableui.core.result import Failure, FailureReason, Result


FLAG_MARKER = "--"

_TRUE_VALUES = frozenset({"true", "yes", "1"})
_FALSE_VALUES = frozenset({"false", "no", "0"})


def _is_flag(token: str) -> bool:
    return token.startswith(FLAG_MARKER)


class FlagTable:
    """Parsed command line flags plus a record of which keys were consulted."""

    def __init__(self, flags: dict[str, str] | None = None) -> None:
        self._flags: dict[str, str] = dict(flags or {})
        self._read: set[str] = set()

    @classmethod
    def parse(cls, args: Sequence[str]) -> FlagTable:
        """Parse raw argument tokens.

        Raises:
            InvalidInputError: On a token without the `--` marker, an empty key,
                or a key given twice.
        """

        flags: dict[str, str] = {}
        i = 0
        while i < len(args):
            token = args[i]
            if not _is_flag(token):
                raise InvalidInputError(
                    FailureReason.MALFORMED_ARGUMENT,
                    f"Unknown command line argument '{token}'",
                    subject=token,
                )
            key = token[len(FLAG_MARKER):].lower()
            if not key:
                raise InvalidInputError(
                    FailureReason.MALFORMED_ARGUMENT,
                    f"Command line argument '{token}' has no flag name",
                    subject=token,
                )
            value = "true"
            if i + 1 < len(args) and not _is_flag(args[i + 1]):
                i += 1
                value = args[i]
            if key in flags:
                raise InvalidInputError(
                    FailureReason.DUPLICATE_FLAG,
                    f"Duplicate command line flag '{key}'",
                    subject=key,
                )
            flags[key] = value
            i += 1
        return cls(flags)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._flags

    def __iter__(self) -> Iterator[str]:
        return iter(self._flags)

    def __len__(self) -> int:
        return len(self._flags)

    def as_dict(self) -> dict[str, str]:
        return dict(self._flags)

    @property
    def read_keys(self) -> frozenset[str]:
        return frozenset(self._read)

    def get(self, key: str, default: str) -> str:
        """Return the flag value or `default`; marks `key` as consulted."""

        key = key.lower()
        self._read.add(key)
        return self._flags.get(key, default)

    def get_bool(self, key: str, default: bool) -> bool:
        """Return the flag as a boolean (true/yes/1, false/no/0).

        Raises:
            InvalidInputError: If the value is not a recognized boolean literal.
        """

        value = self.get(key, "true" if default else "false")
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise InvalidInputError(
            FailureReason.INVALID_VALUE,
            f"Command line flag '{key}' value of '{value}' is not valid",
            subject=key,
        )

    def unused_keys(self) -> list[str]:
        """Keys present on the command line that nothing has consulted, in input order."""

        return [k for k in self._flags if k not in self._read]

    def to_args(self) -> list[str]:
        """Canonical re-serialization; `FlagTable.parse(t.to_args())` equals `t`."""

        out: list[str] = []
        for key, value in self._flags.items():
            out.extend((f"{FLAG_MARKER}{key}", value))
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlagTable):
            return NotImplemented
        return self._flags == other._flags

    def __repr__(self) -> str:
        return f"FlagTable({self._flags!r})"


def parse_command_line(args: Sequence[str]) -> Result[FlagTable]:
    """Parse `args` into a FlagTable, reporting invalid input as a failed Result."""

    try:
        return Result.success(FlagTable.parse(args))
    except InvalidInputError as e:
        return Result.fail(Failure(reason=e.reason, message=e.message, subject=e.subject))
