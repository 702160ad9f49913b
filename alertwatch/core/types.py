"""Domain types for Alertmanager alerts."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Annotations(BaseModel):
    """The annotations we render; anything else Alertmanager sends is ignored."""

    model_config = ConfigDict(extra="ignore")

    summary: str = ""
    description: str = ""
    dashboard: str = ""


class Alert(BaseModel):
    """One active alert as reported by ``/api/v1/alerts``.

    ``fingerprint`` identifies the alert across polls and is derived from
    ``generator_url`` and ``labels`` only. ``target`` names the poller that
    saw it and is filled in after decoding.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: Annotations = Field(default_factory=Annotations)
    generator_url: str = Field(default="", alias="generatorURL")
    starts_at: datetime = Field(alias="startsAt")
    ends_at: datetime = Field(alias="endsAt")

    fingerprint: int = 0
    target: str = ""

    @field_validator("starts_at", "ends_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def name(self) -> str:
        return self.labels.get("alertname", "")
