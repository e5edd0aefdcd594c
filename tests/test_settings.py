from __future__ import annotations

import json
import logging
from pathlib import Path

from tallycheck import AttendanceEngine
from tallycheck.config import Settings, UserSettingsStore, configure_logging


def test_user_settings_store_reads_defaults_without_writing(tmp_path: Path) -> None:
    store = UserSettingsStore(pointer_dir=tmp_path / "home")

    assert store.get("default_token_minutes") == 15
    assert store.get("enforce_single_active_token") is True
    assert not (tmp_path / "home").exists()


def test_user_settings_store_persists_updates(tmp_path: Path) -> None:
    store = UserSettingsStore(pointer_dir=tmp_path / "home")
    store.update(default_token_minutes=30, unknown_key="ignored")

    saved = json.loads((tmp_path / "home" / "user_settings.json").read_text(encoding="utf-8"))
    assert saved["default_token_minutes"] == 30
    assert "unknown_key" not in saved

    reloaded = UserSettingsStore(pointer_dir=tmp_path / "home")
    assert reloaded.get("default_token_minutes") == 30


def test_settings_from_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TALLYCHECK_DATABASE_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("TALLYCHECK_DEFAULT_TOKEN_MINUTES", "20")
    monkeypatch.setenv("TALLYCHECK_ENFORCE_SINGLE_ACTIVE_TOKEN", "false")
    monkeypatch.setenv("TALLYCHECK_LOG_LEVEL", "debug")

    settings = Settings.from_environment()

    assert settings.database_path == tmp_path / "env.db"
    assert settings.default_token_minutes == 20
    assert settings.enforce_single_active_token is False
    assert settings.log_level == "DEBUG"


def test_engine_from_settings(tmp_path: Path, clock) -> None:
    settings = Settings(database_path=tmp_path / "data" / "tallycheck.db", default_token_minutes=30)
    engine = AttendanceEngine.from_settings(settings, clock=clock)

    token = engine.create_token("C1", "Algorithms")

    assert (tmp_path / "data" / "tallycheck.db").exists()
    assert (token.expires_at - token.created_at).total_seconds() == 30 * 60


def test_configure_logging_is_idempotent() -> None:
    logger = configure_logging("INFO")
    handlers = list(logger.handlers)
    configure_logging("DEBUG")

    assert logger.level == logging.DEBUG
    assert logger.handlers == handlers
