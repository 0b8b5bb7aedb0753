"""
Alert event domain models.

An `AlertEvent` represents *what happened*: the gatekeeper consumed a
transition edge into a non-normal condition. A `DeliveryReport` records how
the notification for that event went.

Events are typically used for:
- the recent-alerts list shown on the dashboard
- notification payloads (email, webhook)
- logging and audit trails
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from acmonitor.domain.models import Condition, Reading


class DeliveryStatus(str, Enum):
    """
    Final status of a notification dispatch.

    Members
    -------
    SENT : str
        At least one notifier accepted the event.
    FAILED : str
        Every notifier failed after retries.
    """

    SENT = "SENT"
    FAILED = "FAILED"


@dataclass(frozen=True)
class AlertEvent:
    """
    Alert raised when the gatekeeper reports a new non-normal condition.

    Parameters
    ----------
    condition
        Condition the reading transitioned into.
    reading
        Reading that caused the transition.
    message
        Human-readable description (used in UI, logs and emails).
    raised_at
        When the gatekeeper consumed the edge.
    """

    condition: Condition
    reading: Reading
    message: str
    raised_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.reading.id,
            "type": self.condition.value,
            "message": self.message,
            "current": self.reading.current,
            "timestamp": self.reading.timestamp.isoformat(),
            "raised_at": self.raised_at.isoformat(),
        }


@dataclass(frozen=True)
class DeliveryReport:
    """
    Result of dispatching one alert event to the configured notifiers.

    Parameters
    ----------
    event
        Alert event that was dispatched.
    status
        Final delivery status.
    attempts
        Total notify attempts made across all notifiers.
    finished_at
        When dispatch finished.
    channel
        Channel that delivered the event (None on failure).
    error
        Last error message when the dispatch failed.
    """

    event: AlertEvent
    status: DeliveryStatus
    attempts: int
    finished_at: datetime
    channel: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is DeliveryStatus.SENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.event.reading.id,
            "type": self.event.condition.value,
            "status": self.status.value,
            "attempts": self.attempts,
            "channel": self.channel,
            "error": self.error,
            "finished_at": self.finished_at.isoformat(),
        }
