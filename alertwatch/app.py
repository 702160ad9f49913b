"""Application context — owns the alert queue, the poller registry and the dispatcher."""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from alertwatch.core.config import (
    AppSettings,
    ConfigError,
    TargetsConfig,
    load_targets,
    load_user_settings,
)
from alertwatch.core.types import Alert
from alertwatch.monitor.dispatcher import AlertDispatcher
from alertwatch.monitor.factory import create_dispatcher
from alertwatch.polling.registry import PollerRegistry

logger = structlog.stdlib.get_logger()


class AlertWatchApp:
    """Wires configuration, pollers and notifications together.

    Usage::

        app = AlertWatchApp(load_settings())
        await app.startup()          # raises ConfigError if targets can't load
        await app.run(stop_event)    # dispatches until stop_event is set
    """

    def __init__(
        self,
        settings: AppSettings,
        targets_file: str | None = None,
        user_settings_file: str | None = None,
        dispatcher: AlertDispatcher | None = None,
    ) -> None:
        self._settings = settings
        self._targets_file = targets_file or settings.polling.targets_file or None
        self._user_settings_file = (
            user_settings_file or settings.polling.user_settings_file or None
        )
        self._queue: asyncio.Queue[Alert] = asyncio.Queue(
            maxsize=max(0, settings.polling.queue_size)
        )
        self._registry = PollerRegistry(
            self._queue, timeout_sec=settings.polling.timeout_sec
        )
        self._dispatcher = dispatcher or create_dispatcher(settings.alerts)
        self._targets: TargetsConfig | None = None

    @property
    def registry(self) -> PollerRegistry:
        return self._registry

    @property
    def queue(self) -> asyncio.Queue[Alert]:
        return self._queue

    @property
    def targets(self) -> TargetsConfig | None:
        """Target configuration currently in force."""
        return self._targets

    async def startup(self) -> None:
        """Load targets, register their pollers and apply user settings.

        Raises:
            ConfigError: the target configuration could not be loaded.
        """
        targets = load_targets(self._targets_file)
        self._targets = targets
        await self._registry.reconcile(targets, is_reload=False)
        await self._apply_user_settings(targets)
        logger.info(
            "app_started",
            targets=self._registry.names(),
            running=[p.name for p in self._registry if p.running],
        )

    async def reload(self) -> bool:
        """Re-read targets and user settings; keep the old config on failure."""
        try:
            targets = load_targets(self._targets_file)
        except ConfigError as exc:
            logger.error("config_reload_failed", error=str(exc))
            return False

        self._targets = targets
        rejected = await self._registry.reconcile(targets, is_reload=True)
        await self._apply_user_settings(targets)
        logger.info("config_reloaded", rejected=rejected)
        return True

    async def _apply_user_settings(self, targets: TargetsConfig) -> None:
        try:
            settings = load_user_settings(self._user_settings_file, targets)
        except ConfigError as exc:
            logger.warning("user_settings_load_failed", error=str(exc))
            return
        await self._registry.apply_settings(settings)

    async def run(self, stop_event: asyncio.Event) -> None:
        """Dispatch alerts until *stop_event* is set, then shut down."""
        dispatch_task = asyncio.create_task(
            self._dispatcher.run(self._queue), name="alert-dispatcher"
        )
        try:
            await stop_event.wait()
        finally:
            await self._registry.stop_all()
            dispatch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await dispatch_task
            await self._dispatcher.close()
            logger.info("app_stopped", alerts_dispatched=self._dispatcher.count)
