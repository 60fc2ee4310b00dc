from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from stableui.config.settings import ServerSettings
from stableui.core.errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "Data/Settings.yaml"


def _load_yaml(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    return yaml.safe_load(text)


class SettingsStore:
    """Loads and saves the settings document.

    Neither operation is fatal: load falls back to defaults, save failures are
    logged. Once locked, save is a no-op for the rest of the process run.
    """

    def __init__(self, path: str | Path, *, settings: ServerSettings | None = None) -> None:
        self.path = Path(path)
        self.settings = settings or ServerSettings()
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        self._locked = True

    def load(self) -> ServerSettings:
        if not self.path.exists():
            logger.info("settings_file_missing", extra={"path": str(self.path)})
            self.settings = ServerSettings()
            return self.settings

        invalid: list[ConfigError] = []
        try:
            try:
                doc = _load_yaml(self.path)
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
                raise ConfigError(f"Failed to read settings file: {e}", path=str(self.path)) from e
            self.settings = ServerSettings.from_document(doc, invalid=invalid)
        except ConfigError as e:
            logger.error("settings_load_failed", extra={"path": str(self.path), "error": str(e)})
            self.settings = ServerSettings()
            return self.settings

        # Bad known values fall back to defaults; the document itself is kept.
        for err in invalid:
            logger.error(
                "settings_load_failed",
                extra={"path": str(self.path), "key": err.path, "error": str(err)},
            )

        logger.info("settings_loaded", extra={"path": str(self.path)})
        return self.settings

    def save(self) -> bool:
        """Write the current settings. Returns True only if a write happened."""

        if self._locked:
            return False

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            text = yaml.safe_dump(self.settings.to_document(), sort_keys=False, allow_unicode=True)
            self.path.write_text(text, encoding="utf-8")
        except (OSError, yaml.YAMLError) as e:
            logger.error("settings_save_failed", extra={"path": str(self.path), "error": str(e)})
            return False
        return True
