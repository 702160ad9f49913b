"""Pydantic settings loaded from YAML — app settings, targets, user settings."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError

logger = structlog.stdlib.get_logger()

_settings: AppSettings | None = None

_DEFAULT_SETTINGS_PATH = Path("config/settings.yaml")
_DEFAULT_TARGETS_PATH = Path("configs/default.yml")
_USER_SETTINGS_NAME = ".alertmanager_systray.yml"


class ConfigError(Exception):
    """Target configuration or user settings could not be loaded."""


# ── Targets ──────────────────────────────────────────────────────


class TargetConfig(BaseModel):
    """One pollable Alertmanager target."""

    name: str
    urls: list[str] = Field(default_factory=list)
    poll_interval_sec: int = 60
    poll_by_default: bool = False


class TargetsConfig(BaseModel):
    """Ordered list of configured targets."""

    targets: list[TargetConfig] = Field(default_factory=list)

    def names(self) -> list[str]:
        return [t.name for t in self.targets]


# ── User settings ────────────────────────────────────────────────


class TargetSetting(BaseModel):
    """Desired polling state for one target, as chosen by the user."""

    name: str
    polling: bool = False


class UserSettings(BaseModel):
    """Per-user overrides of the targets' default polling state."""

    targets: list[TargetSetting] = Field(default_factory=list)

    def fill_defaults(self, config: TargetsConfig) -> None:
        """Append a setting for every target the user has no opinion about."""
        known = {s.name for s in self.targets}
        for target in config.targets:
            if target.name not in known:
                self.targets.append(
                    TargetSetting(name=target.name, polling=target.poll_by_default)
                )
                known.add(target.name)


# ── Application settings ─────────────────────────────────────────


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class PollingConfig(BaseModel):
    """Poller wiring — files, HTTP timeout, output queue size."""

    targets_file: str = ""
    user_settings_file: str = ""
    timeout_sec: float | None = None
    queue_size: int = 1


class LogChannelConfig(BaseModel):
    """Structured-log notification channel."""

    enabled: bool = True


class TelegramConfig(BaseModel):
    """Telegram Bot API notification channel."""

    enabled: bool = False
    bot_token: SecretStr = SecretStr("")
    chat_id: str = ""


class DiscordConfig(BaseModel):
    """Discord webhook notification channel."""

    enabled: bool = False
    webhook_url: SecretStr = SecretStr("")


class AlertsConfig(BaseModel):
    """Notification channels for newly detected alerts."""

    log: LogChannelConfig = LogChannelConfig()
    telegram: TelegramConfig = TelegramConfig()
    discord: DiscordConfig = DiscordConfig()


class AppSettings(BaseModel):
    """Root settings container."""

    logging: LoggingConfig = LoggingConfig()
    polling: PollingConfig = PollingConfig()
    alerts: AlertsConfig = AlertsConfig()


def _read_yaml(path: Path) -> Any:
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc


def load_settings(path: str | Path | None = None) -> AppSettings:
    """Load application settings from a YAML file and cache globally.

    Args:
        path: Path to YAML settings. Defaults to config/settings.yaml.

    Returns:
        Parsed AppSettings instance (defaults when the file is absent).
    """
    global _settings  # noqa: PLW0603

    settings_path = Path(path) if path else _DEFAULT_SETTINGS_PATH

    data: dict[str, Any] = {}
    if settings_path.exists():
        with open(settings_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = AppSettings(**data)
    return _settings


def get_settings() -> AppSettings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None


def default_targets_path() -> Path:
    """Locate the default targets file.

    Looks for ``configs/default.yml`` beside the running script first, then
    relative to the working directory.

    Raises:
        ConfigError: neither location exists.
    """
    script_dir = Path(sys.argv[0]).resolve().parent if sys.argv and sys.argv[0] else Path(".")
    candidate = script_dir / _DEFAULT_TARGETS_PATH
    if candidate.is_file():
        return candidate
    if _DEFAULT_TARGETS_PATH.is_file():
        return _DEFAULT_TARGETS_PATH
    raise ConfigError(f"No default targets file found ({_DEFAULT_TARGETS_PATH})")


def load_targets(path: str | Path | None = None) -> TargetsConfig:
    """Load the target list from YAML.

    Raises:
        ConfigError: the file is missing, unreadable or does not match the schema.
    """
    targets_path = Path(path) if path else default_targets_path()
    raw = _read_yaml(targets_path)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a mapping in {targets_path}")
    try:
        config = TargetsConfig(**raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid targets in {targets_path}: {exc}") from exc

    logger.debug("targets_loaded", path=str(targets_path), targets=config.names())
    return config


def user_settings_path() -> Path:
    """Return the per-user settings file path (it may not exist)."""
    return Path.home() / _USER_SETTINGS_NAME


def load_user_settings(
    path: str | Path | None = None,
    config: TargetsConfig | None = None,
) -> UserSettings:
    """Load the user's polling choices, completed with target defaults.

    When no explicit *path* is given and the per-user file does not exist,
    the settings are built from ``poll_by_default`` of each target in
    *config*.

    Raises:
        ConfigError: an existing file is unreadable or invalid, or there is
            neither a file nor a config to derive defaults from.
    """
    if path is None:
        settings_path = user_settings_path()
        if not settings_path.exists():
            if config is None:
                raise ConfigError(f"No user settings at {settings_path}")
            settings = UserSettings()
            settings.fill_defaults(config)
            return settings
    else:
        settings_path = Path(path)

    raw = _read_yaml(settings_path)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a mapping in {settings_path}")
    try:
        settings = UserSettings(**raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid user settings in {settings_path}: {exc}") from exc

    if config is not None:
        settings.fill_defaults(config)
    return settings
