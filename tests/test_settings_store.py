from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from stableui.config.settings import ServerSettings
from stableui.config.store import SettingsStore


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "Settings.yaml"
    p.write_text(text.lstrip(), encoding="utf-8")
    return p


def test_missing_file_uses_defaults_and_logs_info(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    store = SettingsStore(tmp_path / "nope" / "Settings.yaml")

    settings = store.load()

    assert settings == ServerSettings()
    assert [r.levelname for r in caplog.records if r.getMessage() == "settings_file_missing"] == ["INFO"]
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


def test_load_reads_network_section(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        """
network:
  host: 0.0.0.0
  port: 9000
""",
    )

    settings = SettingsStore(p).load()
    assert settings.host == "0.0.0.0"
    assert settings.port == 9000


def test_empty_file_is_defaults(tmp_path: Path) -> None:
    p = _write(tmp_path, "\n")
    assert SettingsStore(p).load() == ServerSettings()


@pytest.mark.parametrize(
    "text",
    [
        "network: [1, 2\n",
        "- just\n- a list\n",
        "network: 5\n",
        "network:\n  port: not-a-port\n",
        "network:\n  port: 70000\n",
        "network:\n  host: ''\n",
    ],
)
def test_corrupt_file_uses_defaults_and_logs_error(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, text: str
) -> None:
    p = _write(tmp_path, text)

    settings = SettingsStore(p).load()

    assert settings.host == "localhost"
    assert settings.port == 7801
    assert any(r.getMessage() == "settings_load_failed" and r.levelno == logging.ERROR for r in caplog.records)


def test_save_preserves_unknown_sections(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        """
network:
  host: example
  port: 1234
  external_url: https://example.invalid
paths:
  models: /srv/models
future_feature:
  enabled: true
""",
    )
    store = SettingsStore(p)
    store.load()
    store.settings.port = 4321

    assert store.save() is True

    doc = yaml.safe_load(p.read_text(encoding="utf-8"))
    assert doc["network"] == {"host": "example", "port": 4321, "external_url": "https://example.invalid"}
    assert doc["paths"] == {"models": "/srv/models"}
    assert doc["future_feature"] == {"enabled": True}


def test_save_creates_parent_directories(tmp_path: Path) -> None:
    p = tmp_path / "Data" / "Settings.yaml"
    store = SettingsStore(p)
    store.load()

    assert store.save() is True
    assert yaml.safe_load(p.read_text(encoding="utf-8")) == {"network": {"host": "localhost", "port": 7801}}


def test_locked_save_is_noop(tmp_path: Path) -> None:
    p = tmp_path / "Settings.yaml"
    store = SettingsStore(p)
    store.lock()

    assert store.locked
    assert store.save() is False
    assert not p.exists()


def test_save_failure_is_logged_not_raised(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    # A directory where the file should be makes the write fail.
    p = tmp_path / "Settings.yaml"
    p.mkdir()
    store = SettingsStore(p)

    assert store.save() is False
    assert any(r.getMessage() == "settings_save_failed" for r in caplog.records)


def test_bad_known_value_keeps_rest_of_document(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    p = _write(
        tmp_path,
        """
network:
  host: h
  port: 99999
backends:
  - comfy
users:
  admin: x
""",
    )
    store = SettingsStore(p)

    settings = store.load()

    assert settings.host == "h"
    assert settings.port == 7801
    failed = [r for r in caplog.records if r.getMessage() == "settings_load_failed"]
    assert [r.key for r in failed] == ["network.port"]
    assert failed[0].path == str(p)

    assert store.save() is True
    doc = yaml.safe_load(p.read_text(encoding="utf-8"))
    assert doc == {
        "network": {"host": "h", "port": 7801},
        "backends": ["comfy"],
        "users": {"admin": "x"},
    }


def test_non_mapping_network_keeps_other_sections(tmp_path: Path) -> None:
    p = _write(
        tmp_path,
        """
network: 5
paths:
  models: /srv/models
""",
    )
    store = SettingsStore(p)
    store.load()
    store.save()

    doc = yaml.safe_load(p.read_text(encoding="utf-8"))
    assert doc["paths"] == {"models": "/srv/models"}
    assert doc["network"] == {"host": "localhost", "port": 7801}


def test_from_document_reports_invalid_fields() -> None:
    invalid: list = []
    settings = ServerSettings.from_document(
        {"network": {"host": "", "port": "x"}, "other": 1},
        invalid=invalid,
    )

    assert sorted(e.path for e in invalid) == ["network.host", "network.port"]
    assert settings.host == "localhost"
    assert settings.raw["other"] == 1
