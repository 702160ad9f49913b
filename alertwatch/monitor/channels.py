"""Notification channels: structured log, Telegram and Discord delivery."""

from __future__ import annotations

import abc
import asyncio
from html import escape as html_escape
from typing import Any

import aiohttp
import structlog

from alertwatch.core.config import DiscordConfig, TelegramConfig
from alertwatch.monitor.types import AlertMessage, Severity

logger = structlog.get_logger(__name__)

# Dedicated logger so alert notifications can be routed apart from app logs.
alert_logger = structlog.get_logger("alerts")

_DISCORD_COLORS: dict[Severity, int] = {
    Severity.INFO: 0x2ECC71,
    Severity.WARNING: 0xF39C12,
    Severity.CRITICAL: 0xE74C3C,
}
_DISCORD_GREY = 0x95A5A6

# Discord rejects embeds over these sizes.
_EMBED_TITLE_MAX = 256
_EMBED_FIELDS_MAX = 25


def headline(msg: AlertMessage) -> str:
    """``[target] [SEVERITY] title``; the target part is omitted when empty."""
    text = f"[{msg.severity.name}] {msg.title}"
    return f"[{msg.target}] {text}" if msg.target else text


def telegram_html(msg: AlertMessage) -> str:
    """Render *msg* for Telegram's HTML parse mode."""
    parts = [f"<b>{html_escape(headline(msg))}</b>"]
    if msg.body:
        parts.append(html_escape(msg.body))
    parts.extend(
        f"<code>{html_escape(name)}</code>: {html_escape(value)}"
        for name, value in msg.fields.items()
    )
    if msg.link:
        parts.append(f'<a href="{html_escape(msg.link)}">details</a>')
    return "\n".join(parts)


def discord_embed(msg: AlertMessage) -> dict[str, Any]:
    """Render *msg* as one Discord embed, coloured by severity."""
    embed: dict[str, Any] = {
        "title": f"[{msg.severity.name}] {msg.title}"[:_EMBED_TITLE_MAX],
        "color": _DISCORD_COLORS.get(msg.severity, _DISCORD_GREY),
    }
    if msg.body:
        embed["description"] = msg.body
    if msg.link:
        embed["url"] = msg.link
    if msg.target:
        embed["footer"] = {"text": msg.target}
    if msg.fields:
        # Discord refuses empty field values.
        embed["fields"] = [
            {"name": name, "value": value or "-", "inline": True}
            for name, value in list(msg.fields.items())[:_EMBED_FIELDS_MAX]
        ]
    return embed


class NotificationChannel(abc.ABC):
    """Base class for alert delivery channels."""

    @abc.abstractmethod
    async def send(self, msg: AlertMessage) -> bool:
        """Send an alert message. Returns True on success."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class LogChannel(NotificationChannel):
    """Writes each alert as one structured log record."""

    async def send(self, msg: AlertMessage) -> bool:
        alert_logger.info(
            "alert",
            severity=msg.severity.name,
            target=msg.target,
            title=msg.title,
            body=msg.body,
            link=msg.link,
            fields=msg.fields,
        )
        return True

    async def close(self) -> None:
        return None


class WebhookChannel(NotificationChannel):
    """A channel that POSTs one JSON document per alert over a shared session.

    Subclasses provide the endpoint and the payload. Transport errors and
    unexpected statuses are logged and reported as a failed send.
    """

    channel = "webhook"
    ok_statuses: frozenset[int] = frozenset({200})

    def __init__(self) -> None:
        self._session: aiohttp.ClientSession | None = None

    @abc.abstractmethod
    def endpoint(self) -> str: ...

    @abc.abstractmethod
    def payload(self, msg: AlertMessage) -> dict[str, Any]: ...

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, msg: AlertMessage) -> bool:
        try:
            session = self._get_session()
            async with session.post(self.endpoint(), json=self.payload(msg)) as resp:
                if resp.status in self.ok_statuses:
                    return True
                detail = await resp.text()
                logger.warning(
                    "channel_send_failed",
                    channel=self.channel,
                    target=msg.target,
                    status=resp.status,
                    body=detail[:200],
                )
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError):
            logger.exception("channel_send_error", channel=self.channel, target=msg.target)
            return False

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


class TelegramChannel(WebhookChannel):
    """Delivers alerts through the Telegram Bot API ``sendMessage`` call."""

    channel = "telegram"

    def __init__(self, config: TelegramConfig) -> None:
        super().__init__()
        self._token = config.bot_token.get_secret_value()
        self._chat_id = config.chat_id

    def endpoint(self) -> str:
        return f"https://api.telegram.org/bot{self._token}/sendMessage"

    def payload(self, msg: AlertMessage) -> dict[str, Any]:
        return {
            "chat_id": self._chat_id,
            "text": telegram_html(msg),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }


class DiscordChannel(WebhookChannel):
    """Delivers alerts to a Discord webhook as a single embed."""

    channel = "discord"
    ok_statuses = frozenset({200, 204})

    def __init__(self, config: DiscordConfig) -> None:
        super().__init__()
        self._webhook_url = config.webhook_url.get_secret_value()

    def endpoint(self) -> str:
        return self._webhook_url

    def payload(self, msg: AlertMessage) -> dict[str, Any]:
        return {"embeds": [discord_embed(msg)]}
