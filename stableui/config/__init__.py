"""Settings document persistence and command line resolution.

- YAML settings document (default `Data/Settings.yaml`)
- Precedence: built-in defaults < settings document < command line flags
"""

from __future__ import annotations

from stableui.config.resolver import ConfigResolver, Environment, LogLevel, RuntimeConfig
from stableui.config.settings import ServerSettings
from stableui.config.store import DEFAULT_SETTINGS_PATH, SettingsStore

__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "ConfigResolver",
    "Environment",
    "LogLevel",
    "RuntimeConfig",
    "ServerSettings",
    "SettingsStore",
]
