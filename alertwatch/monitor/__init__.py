"""Notification shell — formats new alerts and delivers them to channels."""

from alertwatch.monitor.channels import (
    DiscordChannel,
    LogChannel,
    NotificationChannel,
    TelegramChannel,
    WebhookChannel,
)
from alertwatch.monitor.dispatcher import AlertDispatcher
from alertwatch.monitor.factory import create_dispatcher
from alertwatch.monitor.formatters import format_alert
from alertwatch.monitor.types import AlertMessage, Severity

__all__ = [
    "AlertDispatcher",
    "AlertMessage",
    "DiscordChannel",
    "LogChannel",
    "NotificationChannel",
    "Severity",
    "TelegramChannel",
    "WebhookChannel",
    "create_dispatcher",
    "format_alert",
]
