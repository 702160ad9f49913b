"""Alert dispatcher — drains the pollers' queue and fans out to channels."""

from __future__ import annotations

import asyncio

import structlog

from alertwatch.core.types import Alert
from alertwatch.monitor.channels import NotificationChannel
from alertwatch.monitor.formatters import format_alert
from alertwatch.monitor.types import AlertMessage

logger = structlog.get_logger(__name__)


class AlertDispatcher:
    """Consumes newly detected alerts and sends each to every channel.

    A failing channel is logged and skipped; it never blocks the queue
    for longer than its own send.
    """

    def __init__(self, channels: list[NotificationChannel] | None = None) -> None:
        self._channels: list[NotificationChannel] = channels or []
        self._count = 0

    @property
    def count(self) -> int:
        """Number of alerts dispatched so far."""
        return self._count

    @property
    def channels(self) -> list[NotificationChannel]:
        return list(self._channels)

    async def run(self, queue: asyncio.Queue[Alert]) -> None:
        """Dispatch alerts from *queue* until cancelled."""
        while True:
            alert = await queue.get()
            try:
                await self.on_alert(alert)
            finally:
                queue.task_done()

    async def on_alert(self, alert: Alert) -> None:
        self._count += 1
        msg = format_alert(alert)
        logger.info(
            "alert_received",
            count=self._count,
            target=alert.target,
            title=msg.title,
            severity=msg.severity.name,
        )
        await self._dispatch_to_channels(msg)

    async def _dispatch_to_channels(self, msg: AlertMessage) -> None:
        for ch in self._channels:
            try:
                await ch.send(msg)
            except Exception:
                logger.exception(
                    "channel_dispatch_error",
                    channel=type(ch).__name__,
                    title=msg.title,
                )

    async def close(self) -> None:
        for ch in self._channels:
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=type(ch).__name__)
