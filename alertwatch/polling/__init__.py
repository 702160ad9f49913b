"""Target polling — per-target poll loops and the registry that owns them."""

from alertwatch.polling.exceptions import (
    AlertFetchError,
    AlreadyRunningError,
    NotRunningError,
    PollerError,
)
from alertwatch.polling.poller import AlertPoller, PollerConfig, alerts_url, select_new_alerts
from alertwatch.polling.registry import PollerRegistry

__all__ = [
    "AlertFetchError",
    "AlertPoller",
    "AlreadyRunningError",
    "NotRunningError",
    "PollerConfig",
    "PollerError",
    "PollerRegistry",
    "alerts_url",
    "select_new_alerts",
]
