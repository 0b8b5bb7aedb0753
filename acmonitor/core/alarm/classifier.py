"""
Condition classifier.

Maps a reading to exactly one `Condition` based on its current. The function
is stateless and total over finite numbers; the stateful edge detection
lives in `NotificationGatekeeper`.

Boundary semantics
------------------
- ``current > short_circuit_above`` -> SHORT_CIRCUIT (the limit itself is NORMAL)
- ``current == low_current_equals`` -> LOW_CURRENT (exact match, not a band)
- anything else -> NORMAL, including very small non-zero currents
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from acmonitor.domain.models import Condition


class HasCurrent(Protocol):
    current: float


@dataclass(frozen=True)
class ConditionThresholds:
    """
    Tunable limits used by the classifier.

    Parameters
    ----------
    short_circuit_above
        Current (A) strictly above which a reading is a short circuit.
    low_current_equals
        Exact current (A) that signals an open circuit / power loss.
    """

    short_circuit_above: float = 11.0
    low_current_equals: float = 0.0


DEFAULT_THRESHOLDS = ConditionThresholds()


def classify(reading: HasCurrent, thresholds: ConditionThresholds = DEFAULT_THRESHOLDS) -> Condition:
    """
    Classify a reading into an operating condition.

    Parameters
    ----------
    reading
        Any object exposing a numeric ``current`` attribute.
    thresholds
        Limits to apply.

    Returns
    -------
    Condition
        SHORT_CIRCUIT, LOW_CURRENT or NORMAL.
    """
    current = reading.current
    if current > thresholds.short_circuit_above:
        return Condition.SHORT_CIRCUIT
    if current == thresholds.low_current_equals:
        return Condition.LOW_CURRENT
    return Condition.NORMAL


def describe(
    condition: Condition,
    reading: HasCurrent,
    thresholds: ConditionThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """
    Build the operator-facing message for a classified reading.
    """
    if condition is Condition.SHORT_CIRCUIT:
        return (
            f"SHORT CIRCUIT DETECTED! Current: {reading.current}A "
            f"exceeds safe limit of {thresholds.short_circuit_above:g}A"
        )
    if condition is Condition.LOW_CURRENT:
        return (
            f"LOW CURRENT WARNING! Current is {reading.current}A. "
            "Possible open circuit or power loss."
        )
    return "Current within normal limits"
