"""Tests for notification channels — HTTP mocking, error handling, session management."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
from pydantic import SecretStr

from alertwatch.core.config import DiscordConfig, TelegramConfig
from alertwatch.monitor.channels import (
    DiscordChannel,
    LogChannel,
    TelegramChannel,
    discord_embed,
    headline,
    telegram_html,
)
from alertwatch.monitor.types import AlertMessage, Severity

# ── Helpers ─────────────────────────────────────────────────────


def _msg(**kw: object) -> AlertMessage:
    defaults: dict[str, object] = {
        "severity": Severity.WARNING,
        "title": "TEST_TITLE",
        "body": "test body",
        "target": "prod",
        "link": "http://grafana/d/1",
        "fields": {"instance": "db1"},
    }
    defaults.update(kw)
    return AlertMessage(**defaults)  # type: ignore[arg-type]


def _tg_config() -> TelegramConfig:
    return TelegramConfig(enabled=True, bot_token=SecretStr("fake-token"), chat_id="12345")


def _dc_config() -> DiscordConfig:
    return DiscordConfig(
        enabled=True, webhook_url=SecretStr("https://discord.com/api/webhooks/fake")
    )


def _mock_response(status: int = 200, text: str = "ok") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _mock_session(resp: AsyncMock | None = None, error: Exception | None = None) -> MagicMock:
    session = MagicMock()
    if error is not None:
        session.post = MagicMock(side_effect=error)
    else:
        session.post = MagicMock(return_value=resp)
    session.closed = False
    return session


# ── LogChannel ──────────────────────────────────────────────────


class TestLogChannel:
    async def test_send_logs_alert(self) -> None:
        ch = LogChannel()
        with patch("alertwatch.monitor.channels.alert_logger") as mock_logger:
            assert await ch.send(_msg()) is True
        mock_logger.info.assert_called_once()
        kwargs = mock_logger.info.call_args.kwargs
        assert kwargs["title"] == "TEST_TITLE"
        assert kwargs["target"] == "prod"
        assert kwargs["severity"] == "WARNING"

    async def test_close_is_noop(self) -> None:
        await LogChannel().close()


# ── TelegramChannel ────────────────────────────────────────────


class TestTelegramChannel:
    async def test_send_success(self) -> None:
        ch = TelegramChannel(_tg_config())
        session = _mock_session(_mock_response(200))
        ch._session = session

        assert await ch.send(_msg()) is True
        url, = session.post.call_args[0]
        assert "fake-token" in url
        payload = session.post.call_args[1]["json"]
        assert payload["chat_id"] == "12345"
        assert payload["parse_mode"] == "HTML"
        assert "[prod]" in payload["text"]
        assert "http://grafana/d/1" in payload["text"]

    async def test_send_failure_status(self) -> None:
        ch = TelegramChannel(_tg_config())
        ch._session = _mock_session(_mock_response(400, "bad request"))
        assert await ch.send(_msg()) is False

    async def test_send_client_error(self) -> None:
        ch = TelegramChannel(_tg_config())
        ch._session = _mock_session(error=aiohttp.ClientConnectionError("refused"))
        assert await ch.send(_msg()) is False

    async def test_html_escaping(self) -> None:
        ch = TelegramChannel(_tg_config())
        session = _mock_session(_mock_response(200))
        ch._session = session

        await ch.send(_msg(title="<script>alert('xss')</script>", body="a & b"))
        payload = session.post.call_args[1]["json"]
        assert "<script>" not in payload["text"]
        assert "&lt;script&gt;" in payload["text"]
        assert "&amp;" in payload["text"]

    async def test_close_session(self) -> None:
        ch = TelegramChannel(_tg_config())
        session = AsyncMock()
        session.closed = False
        ch._session = session

        await ch.close()
        session.close.assert_awaited_once()
        assert ch._session is None

    async def test_close_when_no_session(self) -> None:
        await TelegramChannel(_tg_config()).close()


# ── DiscordChannel ──────────────────────────────────────────────


class TestDiscordChannel:
    async def test_send_success(self) -> None:
        ch = DiscordChannel(_dc_config())
        session = _mock_session(_mock_response(204))
        ch._session = session

        assert await ch.send(_msg(severity=Severity.CRITICAL)) is True
        embed = session.post.call_args[1]["json"]["embeds"][0]
        assert embed["title"] == "[CRITICAL] TEST_TITLE"
        assert embed["color"] == 0xE74C3C
        assert embed["url"] == "http://grafana/d/1"
        assert embed["fields"] == [{"name": "instance", "value": "db1", "inline": True}]

    async def test_send_200_also_success(self) -> None:
        ch = DiscordChannel(_dc_config())
        ch._session = _mock_session(_mock_response(200))
        assert await ch.send(_msg()) is True

    async def test_send_failure(self) -> None:
        ch = DiscordChannel(_dc_config())
        ch._session = _mock_session(_mock_response(429, "rate limited"))
        assert await ch.send(_msg()) is False

    async def test_send_client_error(self) -> None:
        ch = DiscordChannel(_dc_config())
        ch._session = _mock_session(error=aiohttp.ClientConnectionError("refused"))
        assert await ch.send(_msg()) is False

    async def test_empty_field_value_replaced(self) -> None:
        ch = DiscordChannel(_dc_config())
        session = _mock_session(_mock_response(204))
        ch._session = session
        await ch.send(_msg(fields={"dashboard": ""}))
        embed = session.post.call_args[1]["json"]["embeds"][0]
        assert embed["fields"][0]["value"] == "-"

    async def test_send_timeout(self) -> None:
        ch = DiscordChannel(_dc_config())
        ch._session = _mock_session(error=asyncio.TimeoutError())
        assert await ch.send(_msg()) is False


# ── Rendering ───────────────────────────────────────────────────


class TestRendering:
    def test_headline_with_target(self) -> None:
        assert headline(_msg()) == "[prod] [WARNING] TEST_TITLE"

    def test_headline_without_target(self) -> None:
        assert headline(_msg(target="")) == "[WARNING] TEST_TITLE"

    def test_telegram_html_lines(self) -> None:
        lines = telegram_html(_msg()).split("\n")
        assert lines[0] == "<b>[prod] [WARNING] TEST_TITLE</b>"
        assert lines[1] == "test body"
        assert "<code>instance</code>: db1" in lines
        assert lines[-1] == '<a href="http://grafana/d/1">details</a>'

    def test_telegram_html_skips_empty_parts(self) -> None:
        text = telegram_html(_msg(body="", link="", fields={}))
        assert text == "<b>[prod] [WARNING] TEST_TITLE</b>"

    def test_discord_embed_footer_names_target(self) -> None:
        assert discord_embed(_msg())["footer"] == {"text": "prod"}

    def test_discord_embed_limits(self) -> None:
        fields = {f"label{i:02d}": "x" for i in range(30)}
        embed = discord_embed(_msg(title="t" * 300, fields=fields))
        assert len(embed["title"]) == 256
        assert len(embed["fields"]) == 25

    def test_discord_embed_info_color(self) -> None:
        assert discord_embed(_msg(severity=Severity.INFO))["color"] == 0x2ECC71
