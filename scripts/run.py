#!/usr/bin/env python3
"""alertwatch entrypoint — polls Alertmanager targets and notifies new alerts.

Usage::

    # Run with default targets (configs/default.yml) and ~/.alertmanager_systray.yml
    python scripts/run.py

    # Custom files
    python scripts/run.py --config config/settings.yaml --targets configs/prod.yml

    # Override log level
    python scripts/run.py --log-level DEBUG

Send SIGHUP to reload targets and user settings; SIGINT/SIGTERM to stop.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from alertwatch.app import AlertWatchApp
from alertwatch.core.config import ConfigError, load_settings
from alertwatch.core.logging import setup_logging

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start the pollers and dispatch alerts until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    app = AlertWatchApp(
        settings,
        targets_file=args.targets,
        user_settings_file=args.user_settings,
    )

    try:
        await app.startup()
    except ConfigError as exc:
        logger.error("config_load_failed", error=str(exc))
        print(f"Could not load targets: {exc}", file=sys.stderr)
        return 1

    stop_event = asyncio.Event()
    reloads: set[asyncio.Task[bool]] = set()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    def _reload_handler() -> None:
        logger.info("reload_signal_received")
        task = asyncio.create_task(app.reload())
        reloads.add(task)
        task.add_done_callback(reloads.discard)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass
    if hasattr(signal, "SIGHUP"):
        try:
            loop.add_signal_handler(signal.SIGHUP, _reload_handler)
        except NotImplementedError:
            pass

    try:
        await app.run(stop_event)
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Notify new Alertmanager alerts, once per alert.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to app settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--targets",
        default=None,
        help="Path to targets YAML (default: configs/default.yml)",
    )
    parser.add_argument(
        "--user-settings",
        default=None,
        help="Path to user settings YAML (default: ~/.alertmanager_systray.yml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
