from .log_setup import configure_logging
from .settings import Settings, refresh_settings_from_store, settings, user_settings_store
from .user_settings_store import UserSettingsStore

__all__ = [
    "Settings",
    "UserSettingsStore",
    "configure_logging",
    "refresh_settings_from_store",
    "settings",
    "user_settings_store",
]
