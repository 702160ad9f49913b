"""Core module — config, types, logging."""

from alertwatch.core.config import (
    AppSettings,
    ConfigError,
    TargetConfig,
    TargetSetting,
    TargetsConfig,
    UserSettings,
    get_settings,
    load_settings,
    load_targets,
    load_user_settings,
    reset_settings,
)
from alertwatch.core.logging import setup_logging
from alertwatch.core.types import Alert, Annotations

__all__ = [
    "Alert",
    "Annotations",
    "AppSettings",
    "ConfigError",
    "TargetConfig",
    "TargetSetting",
    "TargetsConfig",
    "UserSettings",
    "get_settings",
    "load_settings",
    "load_targets",
    "load_user_settings",
    "reset_settings",
    "setup_logging",
]
