"""Exception hierarchy for target pollers."""

from __future__ import annotations


class PollerError(Exception):
    """Base exception for poller errors."""


class AlreadyRunningError(PollerError):
    """start() was called on a poller that is already running."""


class NotRunningError(PollerError):
    """stop() was called on a poller that is not running."""


class AlertFetchError(PollerError):
    """An Alertmanager URL could not be fetched (transport error or non-200)."""
