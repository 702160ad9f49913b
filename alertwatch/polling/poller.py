"""Per-target Alertmanager poller — timed loop, config mailbox, new-alert detection."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from alertwatch.alerts.decoder import decode_alerts
from alertwatch.alerts.exceptions import AlertDecodeError
from alertwatch.core.types import Alert
from alertwatch.polling.exceptions import (
    AlertFetchError,
    AlreadyRunningError,
    NotRunningError,
)

logger = structlog.stdlib.get_logger()

ALERTS_PATH = "/api/v1/alerts"

# Mailbox message asking the loop to exit.
_STOP = object()


@dataclass(frozen=True)
class PollerConfig:
    """URLs and interval of one poller; interval is at least one second."""

    urls: tuple[str, ...]
    poll_interval_sec: int

    @classmethod
    def build(cls, urls: Iterable[str], poll_interval_sec: int) -> PollerConfig:
        return cls(urls=tuple(urls), poll_interval_sec=max(1, int(poll_interval_sec)))


def alerts_url(base_url: str) -> str:
    """Join a target base URL with the Alertmanager alerts endpoint."""
    return base_url.rstrip("/") + ALERTS_PATH


def select_new_alerts(alerts: Iterable[Alert], previous: set[int]) -> list[Alert]:
    """Return alerts whose fingerprint is absent from *previous*.

    Encounter order is kept and each fingerprint is returned at most once.
    """
    seen: set[int] = set()
    fresh: list[Alert] = []
    for alert in alerts:
        if alert.fingerprint in previous or alert.fingerprint in seen:
            continue
        seen.add(alert.fingerprint)
        fresh.append(alert)
    return fresh


class AlertPoller:
    """Polls every URL of one target and emits alerts not seen last cycle.

    All poller state is written by a single loop task which handles one
    event at a time: a timer tick (run a cycle), a config update, or a stop
    request. Newly seen alerts are put on the shared *output* queue, so a
    consumer that falls behind stalls this poller only.

    Usage::

        queue: asyncio.Queue[Alert] = asyncio.Queue(maxsize=1)
        poller = AlertPoller("prod", queue, ["http://alertmanager:9093"], 30)
        await poller.start()
        alert = await queue.get()
    """

    def __init__(
        self,
        name: str,
        output: asyncio.Queue[Alert],
        urls: Sequence[str],
        poll_interval_sec: int,
        timeout_sec: float | None = None,
    ) -> None:
        self._name = name
        self._output = output
        self._config = PollerConfig.build(urls, poll_interval_sec)
        self._timeout_sec = timeout_sec
        self._running = False
        self._mailbox: asyncio.Queue[object] | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping: set[asyncio.Task[None]] = set()
        self._error_count = 0
        self._cycle_count = 0
        self._last_poll_time: float = 0.0

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._running

    def is_running(self) -> bool:
        return self._running

    @property
    def urls(self) -> tuple[str, ...]:
        return self._config.urls

    @property
    def poll_interval_sec(self) -> int:
        return self._config.poll_interval_sec

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def last_poll_time(self) -> float:
        return self._last_poll_time

    # ── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        """Start polling; the first cycle treats every active alert as new.

        Raises:
            AlreadyRunningError: the poller is already running.
        """
        if self._running:
            raise AlreadyRunningError(f"Poller {self._name!r} is already running")
        self._running = True
        self._mailbox = asyncio.Queue()
        self._task = asyncio.create_task(
            self._poll_loop(self._mailbox), name=f"poller:{self._name}"
        )
        logger.info(
            "poller_started",
            poller=self._name,
            urls=list(self._config.urls),
            poll_interval_sec=self._config.poll_interval_sec,
        )

    async def stop(self) -> None:
        """Ask the loop to exit after any in-flight cycle; does not wait.

        Config updates still waiting in the mailbox are applied directly.

        Raises:
            NotRunningError: the poller is not running.
        """
        if not self._running:
            raise NotRunningError(f"Poller {self._name!r} is not running")
        self._running = False
        if self._mailbox is not None:
            # Pending updates apply here; the exiting loop only sees _STOP.
            while not self._mailbox.empty():
                pending = self._mailbox.get_nowait()
                if isinstance(pending, PollerConfig):
                    self._config = pending
            self._mailbox.put_nowait(_STOP)
            self._mailbox = None
        if self._task is not None:
            self._stopping.add(self._task)
            self._task.add_done_callback(self._stopping.discard)
            self._task = None
        logger.info("poller_stopped", poller=self._name)

    async def wait_stopped(self) -> None:
        """Wait until every loop asked to stop has exited."""
        if self._stopping:
            await asyncio.gather(*self._stopping, return_exceptions=True)

    async def update_config(self, urls: Sequence[str], poll_interval_sec: int) -> None:
        """Replace URLs and interval.

        A stopped poller takes the config immediately. A running poller
        receives it through its mailbox and applies it between cycles.
        """
        config = PollerConfig.build(urls, poll_interval_sec)
        if self._running and self._mailbox is not None:
            await self._mailbox.put(config)
        else:
            self._config = config

    # ── Loop ────────────────────────────────────────────────────

    async def _poll_loop(self, mailbox: asyncio.Queue[object]) -> None:
        loop = asyncio.get_running_loop()
        snapshot: set[int] = set()
        next_tick = loop.time() + self._config.poll_interval_sec

        client_kwargs: dict[str, Any] = {}
        if self._timeout_sec:
            client_kwargs["timeout"] = httpx.Timeout(self._timeout_sec)

        async with httpx.AsyncClient(**client_kwargs) as http:
            while True:
                wait = max(0.0, next_tick - loop.time())
                try:
                    message = await asyncio.wait_for(mailbox.get(), timeout=wait)
                except asyncio.TimeoutError:
                    message = None

                if message is _STOP:
                    break

                if isinstance(message, PollerConfig):
                    if self._apply_config(message):
                        next_tick = loop.time() + message.poll_interval_sec
                    continue

                try:
                    snapshot = await self._run_cycle(http, snapshot)
                except Exception:
                    self._error_count += 1
                    logger.exception("poll_cycle_error", poller=self._name)

                next_tick += self._config.poll_interval_sec
                now = loop.time()
                if next_tick < now:
                    # Cycle overran the interval; tick once right away.
                    next_tick = now

        logger.debug("poller_loop_exited", poller=self._name)

    def _apply_config(self, config: PollerConfig) -> bool:
        """Install *config*; return True when the interval changed."""
        interval_changed = config.poll_interval_sec != self._config.poll_interval_sec
        self._config = config
        logger.info(
            "poller_reconfigured",
            poller=self._name,
            urls=list(config.urls),
            poll_interval_sec=config.poll_interval_sec,
        )
        return interval_changed

    async def _fetch(self, http: httpx.AsyncClient, url: str) -> list[Alert]:
        try:
            response = await http.get(url)
        except httpx.HTTPError as exc:
            raise AlertFetchError(f"Request to {url} failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise AlertFetchError(f"{url} returned {response.status_code}")

        return decode_alerts(response.content)

    async def _run_cycle(self, http: httpx.AsyncClient, previous: set[int]) -> set[int]:
        """Poll every URL once, emit unseen alerts, return the new snapshot.

        A URL that fails contributes nothing to the snapshot, so its alerts
        count as new again once it recovers.
        """
        config = self._config
        current: set[int] = set()
        polled: list[Alert] = []

        for base_url in config.urls:
            url = alerts_url(base_url)
            try:
                alerts = await self._fetch(http, url)
            except (AlertFetchError, AlertDecodeError) as exc:
                self._error_count += 1
                logger.warning(
                    "poll_url_failed",
                    poller=self._name,
                    url=url,
                    error=str(exc),
                    error_count=self._error_count,
                )
                continue
            polled.extend(alerts)
            current.update(alert.fingerprint for alert in alerts)

        fresh = select_new_alerts(polled, previous)
        for alert in fresh:
            logger.debug(
                "alert_detected",
                poller=self._name,
                alertname=alert.name,
                fingerprint=f"{alert.fingerprint:016x}",
            )
            await self._output.put(alert.model_copy(update={"target": self._name}))

        self._cycle_count += 1
        self._last_poll_time = time.time()
        if fresh:
            logger.info("new_alerts", poller=self._name, count=len(fresh))
        return current
