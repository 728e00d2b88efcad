"""Runtime configuration."""

from ctx_agent.config.settings import Settings, get_settings
from ctx_agent.config.user_config import UserConfig, UserConfigError, UserConfigStore

__all__ = [
    "Settings",
    "UserConfig",
    "UserConfigError",
    "UserConfigStore",
    "get_settings",
]
