"""Convenience factory for wiring the notification stack."""

from __future__ import annotations

from alertwatch.core.config import AlertsConfig
from alertwatch.monitor.channels import (
    DiscordChannel,
    LogChannel,
    NotificationChannel,
    TelegramChannel,
)
from alertwatch.monitor.dispatcher import AlertDispatcher


def create_dispatcher(config: AlertsConfig) -> AlertDispatcher:
    """Build a dispatcher with every channel enabled in *config*."""
    channels: list[NotificationChannel] = []

    if config.log.enabled:
        channels.append(LogChannel())

    if config.telegram.enabled:
        channels.append(TelegramChannel(config.telegram))

    if config.discord.enabled:
        channels.append(DiscordChannel(config.discord))

    return AlertDispatcher(channels=channels)
