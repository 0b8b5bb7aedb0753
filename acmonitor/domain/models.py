"""
Domain models and enums.

This module defines the core domain-level types used across the system:
- Operating conditions derived from a reading's current
- Voltage/current/power readings produced by the meter
- Gatekeeper decisions returned for each processed reading

These are designed as immutable (frozen) dataclasses where appropriate to
support safe sharing across layers and threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class Condition(str, Enum):
    """
    Operating condition of the monitored conductor.

    Members
    -------
    NORMAL : str
        Current is inside the safe operating band.
    SHORT_CIRCUIT : str
        Current rose above the short-circuit limit.
    LOW_CURRENT : str
        Current dropped to exactly zero (open circuit or power loss).

    Notes
    -----
    ``severity_rank`` orders conditions for display only. Transition logic
    treats every non-normal condition as equally alert-worthy.
    """

    NORMAL = "NORMAL"
    SHORT_CIRCUIT = "SHORT_CIRCUIT"
    LOW_CURRENT = "LOW_CURRENT"

    @property
    def severity_rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def is_alert(self) -> bool:
        return self is not Condition.NORMAL


_SEVERITY_RANK = {
    Condition.NORMAL: 0,
    Condition.LOW_CURRENT: 1,
    Condition.SHORT_CIRCUIT: 2,
}


@dataclass(frozen=True)
class Measurements:
    """
    Validated numeric fields of an incoming sample, before it is stored.

    Parameters
    ----------
    voltage
        Line voltage in volts.
    current
        Line current in amperes.
    power
        Active power in watts.
    """

    voltage: float
    current: float
    power: float


@dataclass(frozen=True)
class Reading:
    """
    One timestamped voltage/current/power sample.

    Parameters
    ----------
    id
        Opaque identifier assigned when the reading was stored.
    voltage
        Line voltage in volts.
    current
        Line current in amperes.
    power
        Active power in watts.
    timestamp
        When the sample was received (or the producer-supplied time).

    Notes
    -----
    Readings are owned by the producer/store. Classifier and gatekeeper only
    reference them.
    """

    id: str
    voltage: float
    current: float
    power: float
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON shape used by the HTTP API.

        Returns
        -------
        dict
            Mapping with ``_id``, ``voltage``, ``current``, ``power`` and an
            ISO-8601 ``timestamp``.
        """
        return {
            "_id": self.id,
            "voltage": self.voltage,
            "current": self.current,
            "power": self.power,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "Reading":
        """
        Build a reading from its JSON shape, validating every field.

        Raises
        ------
        ValidationError
            If a measurement is missing or not a finite number, or the
            timestamp cannot be parsed.
        """
        from acmonitor.ingest.validation import parse_reading

        return parse_reading(obj)


@dataclass(frozen=True)
class GateDecision:
    """
    Outcome of running one reading through the notification gatekeeper.

    Parameters
    ----------
    should_notify
        True only when the reading crossed into a new non-normal condition.
    condition
        Classification of the reading.
    """

    should_notify: bool
    condition: Condition
