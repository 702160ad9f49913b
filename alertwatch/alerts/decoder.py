"""Decode ``/api/v1/alerts`` responses into fingerprinted Alert records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from alertwatch.alerts.exceptions import AlertDecodeError
from alertwatch.alerts.fingerprint import fingerprint
from alertwatch.core.types import Alert, Annotations


class _AlertPayload(BaseModel):
    """Wire shape of one alert. Alertmanager's own ``fingerprint``,
    ``status`` and ``receivers`` keys are not part of it."""

    model_config = ConfigDict(extra="ignore")

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: Annotations = Field(default_factory=Annotations)
    generator_url: str = Field(default="", alias="generatorURL")
    starts_at: datetime = Field(alias="startsAt")
    ends_at: datetime = Field(alias="endsAt")


_PAYLOAD = TypeAdapter(list[_AlertPayload])


def decode_alerts(data: bytes | str) -> list[Alert]:
    """Parse a JSON array of alerts and fingerprint each one.

    Expected structure::

        [
            {
                "labels": {"alertname": "InstanceDown", "instance": "db1"},
                "annotations": {"summary": "...", "description": "..."},
                "generatorURL": "http://prometheus/graph?g0.expr=...",
                "startsAt": "2018-09-22T15:24:13Z",
                "endsAt": "2018-09-22T16:42:31Z"
            }
        ]

    Raises:
        AlertDecodeError: the payload is not valid JSON or does not match
            the schema. Nothing is returned on error.
    """
    try:
        payloads = _PAYLOAD.validate_json(data)
    except ValidationError as exc:
        raise AlertDecodeError(
            f"Invalid Alertmanager response: {exc.error_count()} error(s)"
        ) from exc

    return [
        Alert(
            labels=p.labels,
            annotations=p.annotations,
            generator_url=p.generator_url,
            starts_at=p.starts_at,
            ends_at=p.ends_at,
            fingerprint=fingerprint(p.generator_url, p.labels),
        )
        for p in payloads
    ]
