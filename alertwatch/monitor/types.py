"""Types for rendering alerts as notifications."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field


class Severity(IntEnum):
    """Notification severity — ordered so comparisons work naturally."""

    INFO = 1
    WARNING = 2
    CRITICAL = 3


class AlertMessage(BaseModel):
    """An alert rendered for a notification channel."""

    severity: Severity
    title: str
    body: str = ""
    target: str = ""
    link: str = ""
    fields: dict[str, str] = Field(default_factory=dict)
