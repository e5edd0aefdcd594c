from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from tallycheck.config.user_settings_store import UserSettingsStore

BASE_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = BASE_DIR / ".env"
load_dotenv(ENV_PATH)

user_settings_store = UserSettingsStore()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return bool(default)
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _app_data_dir() -> Path:
    return Path(user_settings_store.get("app_data_dir")).expanduser()


@dataclass(frozen=True)
class Settings:
    database_path: Path
    default_token_minutes: int = 15
    enforce_single_active_token: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_environment(cls) -> "Settings":
        return cls(
            database_path=Path(
                os.getenv("TALLYCHECK_DATABASE_PATH", str(_app_data_dir() / "tallycheck.db"))
            ).expanduser(),
            default_token_minutes=int(
                os.getenv("TALLYCHECK_DEFAULT_TOKEN_MINUTES", user_settings_store.get("default_token_minutes", 15))
            ),
            enforce_single_active_token=_env_flag(
                "TALLYCHECK_ENFORCE_SINGLE_ACTIVE_TOKEN",
                user_settings_store.get("enforce_single_active_token", True),
            ),
            log_level=os.getenv("TALLYCHECK_LOG_LEVEL", "WARNING").upper(),
        )


settings = Settings.from_environment()


def refresh_settings_from_store() -> Settings:
    """Rebuild the settings object from the current user store values."""

    global settings  # noqa: PLW0603 - module-level singleton

    user_settings_store.reload()
    settings = Settings.from_environment()
    return settings
