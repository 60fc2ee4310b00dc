from __future__ import annotations

from stableui.core.errors import ConfigError, InvalidInputError, StableUIError
from stableui.core.flags import FlagTable, parse_command_line
from stableui.core.result import Failure, FailureReason, Result

__all__ = [
    "ConfigError",
    "Failure",
    "FailureReason",
    "FlagTable",
    "InvalidInputError",
    "Result",
    "StableUIError",
    "parse_command_line",
]
