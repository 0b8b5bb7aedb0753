"""
Client-side dashboard state.

Holds what the dashboard displays: the latest reading, a bounded rolling
chart buffer, the recent alerts and the connectivity banner. Its own
last-alert condition only drives the recent-alerts list; notification
decisions belong to the server-side gatekeeper.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Deque, List, Optional

from acmonitor.core.alarm.classifier import DEFAULT_THRESHOLDS, ConditionThresholds, classify, describe
from acmonitor.domain.models import Condition, Reading


@dataclass(frozen=True)
class ChartPoint:
    """One point of the rolling voltage/current/power chart."""
    time: str
    voltage: float
    current: float
    power: float
    timestamp: datetime


@dataclass(frozen=True)
class DashboardAlert:
    """Alert entry shown in the dashboard's recent-alerts list."""
    id: str
    condition: Condition
    message: str
    timestamp: datetime
    current: float


class DashboardModel:
    """
    Thread-safe view state for the polling dashboard.

    Parameters
    ----------
    thresholds
        Limits used by the client-side classifier.
    chart_window
        Number of chart points kept (oldest dropped first).
    max_alerts
        Number of recent alerts kept (newest first).
    """

    def __init__(
        self,
        thresholds: ConditionThresholds = DEFAULT_THRESHOLDS,
        chart_window: int = 20,
        max_alerts: int = 10,
    ):
        self._thresholds = thresholds
        self._lock = threading.RLock()
        self._chart: Deque[ChartPoint] = deque(maxlen=chart_window)
        self._alerts: Deque[DashboardAlert] = deque(maxlen=max_alerts)
        self._latest: Optional[Reading] = None
        self._last_condition = Condition.NORMAL
        self.last_update: Optional[datetime] = None
        self.api_error: Optional[str] = None
        self.email_status: str = ""

    def apply(self, reading: Reading, now: Optional[datetime] = None) -> Optional[Condition]:
        """
        Apply a newly fetched reading.

        Returns
        -------
        Condition or None
            The new non-normal condition when this reading is a client-side
            transition into it, else None.
        """
        with self._lock:
            self._latest = reading
            self.last_update = now or datetime.now(timezone.utc)
            self.api_error = None
            self._chart.append(
                ChartPoint(
                    time=reading.timestamp.strftime("%H:%M:%S"),
                    voltage=reading.voltage,
                    current=reading.current,
                    power=reading.power,
                    timestamp=reading.timestamp,
                )
            )

            condition = classify(reading, self._thresholds)
            transitioned = condition.is_alert and condition is not self._last_condition
            self._last_condition = condition

            if not transitioned:
                return None

            self._alerts.appendleft(
                DashboardAlert(
                    id=reading.id,
                    condition=condition,
                    message=describe(condition, reading, self._thresholds),
                    timestamp=reading.timestamp,
                    current=reading.current,
                )
            )
            return condition

    def mark_unavailable(self, error: str) -> None:
        """Show the connectivity banner; displayed metrics are left as they were."""
        with self._lock:
            self.api_error = error

    def set_email_status(self, status: str) -> None:
        with self._lock:
            self.email_status = status

    def status_level(self) -> str:
        """
        Display level for the latest reading: OK / WARNING / CRITICAL.
        """
        with self._lock:
            if self._latest is None:
                return "OK"
            condition = classify(self._latest, self._thresholds)
        if condition is Condition.SHORT_CIRCUIT:
            return "CRITICAL"
        if condition is Condition.LOW_CURRENT:
            return "WARNING"
        return "OK"

    @property
    def latest(self) -> Optional[Reading]:
        with self._lock:
            return self._latest

    @property
    def chart(self) -> List[ChartPoint]:
        with self._lock:
            return list(self._chart)

    @property
    def alerts(self) -> List[DashboardAlert]:
        with self._lock:
            return list(self._alerts)
