"""Alert decoding and identity."""

from alertwatch.alerts.decoder import decode_alerts
from alertwatch.alerts.exceptions import AlertDecodeError, AlertError
from alertwatch.alerts.fingerprint import fingerprint

__all__ = [
    "AlertDecodeError",
    "AlertError",
    "decode_alerts",
    "fingerprint",
]
