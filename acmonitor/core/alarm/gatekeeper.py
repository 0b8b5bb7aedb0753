"""
Notification gatekeeper.

This module contains the stateful edge detector that decides, per processed
reading, whether a new notification is due. It turns level information
(the classifier's condition) into edge-triggered decisions:

- any -> NORMAL:                   silent (no "all clear" is modelled)
- X -> X (same non-normal):        silent (de-duplication)
- any -> Y (new non-normal, Y!=X): notify

The last reported condition lives in an injectable `ConditionCell`. The
read-check-write runs under the cell's lock and the state is updated before
the caller performs any notification, so two racing callers can never both
observe the same edge.
"""

from __future__ import annotations

import threading
from typing import Optional

from acmonitor.core.alarm.classifier import DEFAULT_THRESHOLDS, ConditionThresholds, HasCurrent, classify
from acmonitor.domain.models import Condition, GateDecision


class ConditionCell:
    """
    Lock-guarded holder for the last gatekeeper-processed condition.

    One cell corresponds to one monitored circuit. It starts at NORMAL and is
    reset only by creating a new cell (i.e. process restart).

    Parameters
    ----------
    initial
        Starting condition.
    """

    def __init__(self, initial: Condition = Condition.NORMAL):
        self._value = initial
        self._lock = threading.Lock()

    def transition(self, new: Condition) -> Condition:
        """
        Atomically store ``new`` and return the previous condition.
        """
        with self._lock:
            prev = self._value
            self._value = new
            return prev


class NotificationGatekeeper:
    """
    Edge-triggered notification decision maker.

    Parameters
    ----------
    cell
        State cell to own. A fresh NORMAL cell is created when omitted.
    thresholds
        Classifier limits.

    Notes
    -----
    ``decide`` is CPU-only and never raises for well-typed input. Dispatch
    failures happen after it returns and must not re-arm the cell.
    """

    def __init__(
        self,
        cell: Optional[ConditionCell] = None,
        thresholds: ConditionThresholds = DEFAULT_THRESHOLDS,
    ):
        self._cell = cell if cell is not None else ConditionCell()
        self._thresholds = thresholds

    @property
    def thresholds(self) -> ConditionThresholds:
        return self._thresholds

    def decide(self, reading: HasCurrent) -> GateDecision:
        """
        Classify a reading and decide whether it opens a new alert edge.

        Parameters
        ----------
        reading
            Reading to process. Callers invoke this at most once per reading.

        Returns
        -------
        GateDecision
            ``should_notify`` is True only for NORMAL->fault and
            fault->different-fault edges.
        """
        condition = classify(reading, self._thresholds)

        # Swapping unconditionally covers all three branches: NORMAL and a
        # repeated fault leave the cell equal to `condition` either way.
        prev = self._cell.transition(condition)

        should_notify = condition.is_alert and condition is not prev
        return GateDecision(should_notify=should_notify, condition=condition)
