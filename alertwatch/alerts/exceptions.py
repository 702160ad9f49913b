"""Exception hierarchy for alert decoding."""

from __future__ import annotations


class AlertError(Exception):
    """Base exception for alert handling errors."""


class AlertDecodeError(AlertError):
    """An Alertmanager response could not be decoded into alerts."""
