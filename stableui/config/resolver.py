"""Command line over settings resolution.

Precedence, lowest to highest: built-in defaults, the settings document, and
explicit command line flags. Each layer overrides only the fields it supplies.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import MutableMapping

from stableui.accounts.sessions import DEFAULT_LOCAL_USER_ID
from stableui.config.settings import ServerSettings
from stableui.core.errors import InvalidInputError
from stableui.core.flags import FlagTable
from stableui.core.result import Failure, FailureReason, Result


ENV_ENVIRONMENT = "STABLEUI_ENVIRONMENT"
ENV_URLS = "STABLEUI_URLS"
ENV_LOG_LEVEL = "STABLEUI_LOG_LEVEL"


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


_ENVIRONMENT_ALIASES = {
    "dev": Environment.DEVELOPMENT,
    "development": Environment.DEVELOPMENT,
    "prod": Environment.PRODUCTION,
    "production": Environment.PRODUCTION,
}


class LogLevel(str, enum.Enum):
    TRACE = "trace"
    DEBUG = "debug"
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    NONE = "none"

    @property
    def uvicorn_name(self) -> str:
        # uvicorn has no "none"; critical is the quietest it offers.
        return {
            LogLevel.INFORMATION: "info",
            LogLevel.NONE: "critical",
        }.get(self, self.value)


_LOG_LEVEL_ALIASES = {
    **{level.value: level for level in LogLevel},
    "info": LogLevel.INFORMATION,
    "warn": LogLevel.WARNING,
}


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Effective configuration for this process run. Immutable once resolved."""

    environment: Environment
    host: str
    port: int
    log_level: LogLevel
    local_user_id: str
    settings_locked: bool

    @property
    def bind_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def _invalid(key: str, value: str, what: str) -> InvalidInputError:
    return InvalidInputError(
        FailureReason.INVALID_VALUE,
        f"Command line flag '{key}' value of '{value}' is not a valid {what}",
        subject=key,
    )


class ConfigResolver:
    """Merges a FlagTable over loaded ServerSettings into a RuntimeConfig."""

    def __init__(self, flags: FlagTable, settings: ServerSettings) -> None:
        self._flags = flags
        self._settings = settings

    def resolve(self) -> Result[RuntimeConfig]:
        try:
            return Result.success(self._resolve())
        except InvalidInputError as e:
            return Result.fail(Failure(reason=e.reason, message=e.message, subject=e.subject))

    def _resolve(self) -> RuntimeConfig:
        flags = self._flags

        env_value = flags.get("environment", Environment.PRODUCTION.value)
        environment = _ENVIRONMENT_ALIASES.get(env_value.lower())
        if environment is None:
            raise _invalid("environment", env_value, "environment (dev, development, prod, production)")

        host = flags.get("host", self._settings.host)
        if not host.strip():
            raise _invalid("host", host, "host name")

        port_value = flags.get("port", str(self._settings.port))
        try:
            port = int(port_value)
        except ValueError:
            raise _invalid("port", port_value, "port number") from None
        if not 1 <= port <= 65535:
            raise _invalid("port", port_value, "port number")

        default_level = LogLevel.DEBUG if environment is Environment.DEVELOPMENT else LogLevel.WARNING
        level_value = flags.get("asp_loglevel", default_level.value)
        log_level = _LOG_LEVEL_ALIASES.get(level_value.lower())
        if log_level is None:
            raise _invalid("asp_loglevel", level_value, "log level")

        local_user_id = flags.get("user_id", DEFAULT_LOCAL_USER_ID)
        settings_locked = flags.get_bool("lock_settings", False)

        return RuntimeConfig(
            environment=environment,
            host=host,
            port=port,
            log_level=log_level,
            local_user_id=local_user_id,
            settings_locked=settings_locked,
        )


def apply_environment(config: RuntimeConfig, environ: MutableMapping[str, str] | None = None) -> None:
    """Expose the resolved mode, bind address and log level to the service layer."""

    env = os.environ if environ is None else environ
    env[ENV_ENVIRONMENT] = config.environment.value
    env[ENV_URLS] = config.bind_url
    env[ENV_LOG_LEVEL] = config.log_level.value
