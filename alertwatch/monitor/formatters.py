"""Pure functions that turn alerts into AlertMessage objects."""

from __future__ import annotations

from alertwatch.core.types import Alert
from alertwatch.monitor.types import AlertMessage, Severity

# Alertmanager "severity" label → notification severity
_SEVERITY_LABELS: dict[str, Severity] = {
    "critical": Severity.CRITICAL,
    "page": Severity.CRITICAL,
    "error": Severity.CRITICAL,
    "warning": Severity.WARNING,
    "info": Severity.INFO,
    "none": Severity.INFO,
}


def alert_severity(alert: Alert) -> Severity:
    """Map the alert's ``severity`` label, defaulting to WARNING."""
    label = alert.labels.get("severity", "").strip().lower()
    return _SEVERITY_LABELS.get(label, Severity.WARNING)


def alert_title(alert: Alert) -> str:
    return alert.annotations.summary or alert.name or "alert"


def format_alert(alert: Alert) -> AlertMessage:
    """Convert an Alert to an AlertMessage."""
    fields = {
        "target": alert.target,
        "started": alert.starts_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
    }
    if alert.annotations.dashboard:
        fields["dashboard"] = alert.annotations.dashboard
    for key in sorted(alert.labels):
        if key != "severity":
            fields[key] = alert.labels[key]

    return AlertMessage(
        severity=alert_severity(alert),
        title=alert_title(alert),
        body=alert.annotations.description,
        target=alert.target,
        link=alert.annotations.dashboard or alert.generator_url,
        fields=fields,
    )
