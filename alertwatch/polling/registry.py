"""Registry of target pollers — reconciles config and applies user settings."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

import structlog

from alertwatch.core.config import TargetsConfig, UserSettings
from alertwatch.core.types import Alert
from alertwatch.polling.poller import AlertPoller

logger = structlog.stdlib.get_logger()


class PollerRegistry:
    """Maps target name to its AlertPoller.

    Targets are only created by the initial load. A reload can reconfigure
    known targets but never adds new ones, and targets that disappear from
    the configuration are kept.
    """

    def __init__(
        self,
        output: asyncio.Queue[Alert],
        timeout_sec: float | None = None,
    ) -> None:
        self._output = output
        self._timeout_sec = timeout_sec
        self._pollers: dict[str, AlertPoller] = {}

    def get(self, name: str) -> AlertPoller | None:
        return self._pollers.get(name)

    def names(self) -> list[str]:
        return list(self._pollers)

    def __contains__(self, name: object) -> bool:
        return name in self._pollers

    def __len__(self) -> int:
        return len(self._pollers)

    def __iter__(self) -> Iterator[AlertPoller]:
        return iter(list(self._pollers.values()))

    async def reconcile(self, config: TargetsConfig, is_reload: bool) -> list[str]:
        """Create or update pollers from *config*.

        Returns:
            Names of targets rejected because they are new on a reload.
        """
        rejected: list[str] = []
        for target in config.targets:
            poller = self._pollers.get(target.name)
            if poller is not None:
                await poller.update_config(target.urls, target.poll_interval_sec)
            elif is_reload:
                logger.warning("target_rejected_on_reload", target=target.name)
                rejected.append(target.name)
            else:
                self._pollers[target.name] = AlertPoller(
                    name=target.name,
                    output=self._output,
                    urls=target.urls,
                    poll_interval_sec=target.poll_interval_sec,
                    timeout_sec=self._timeout_sec,
                )
                logger.info("target_registered", target=target.name)
        return rejected

    async def apply_settings(self, settings: UserSettings) -> None:
        """Start or stop pollers so they match the user's choices."""
        for setting in settings.targets:
            poller = self._pollers.get(setting.name)
            if poller is None:
                continue
            if poller.running != setting.polling:
                await self.toggle(setting.name)

    async def toggle(self, name: str) -> bool:
        """Flip a poller between running and stopped; return the new state.

        Raises:
            KeyError: no poller is registered under *name*.
        """
        poller = self._pollers[name]
        if poller.running:
            await poller.stop()
        else:
            await poller.start()
        return poller.running

    async def stop_all(self) -> None:
        """Stop every running poller and wait for their loops to exit."""
        for poller in self._pollers.values():
            if poller.running:
                await poller.stop()
        await asyncio.gather(*(p.wait_stopped() for p in self._pollers.values()))
