from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from acmonitor.core.state.alert_store import AlertStore
from acmonitor.core.state.reading_store import ReadingStore
from acmonitor.domain.events import AlertEvent, DeliveryReport
from acmonitor.domain.models import Measurements, Reading


@dataclass
class StateStore:
    """
    Thread-safe facade for server-side application state.

    'StateStore' aggregates and coordinates access to:
    - the reading history (ingestion + query collaborator)
    - alert history and delivery reports

    Concurrency Model
    -----------------
    All reads/writes are guarded by a single re-entrant lock (`threading.RLock`).
    Request handlers, the notification worker and the dashboard may touch the
    store concurrently.

    Notes
    -----
    The gatekeeper's last condition is deliberately NOT stored here; it is
    owned exclusively by `NotificationGatekeeper`.

    Attributes
    ----------
    readings
        Reading history.
    alerts
        Alert events + delivery reports.
    """

    readings: ReadingStore = field(default_factory=ReadingStore)
    alerts: AlertStore = field(default_factory=AlertStore)

    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    # --- Readings API ---
    def add_reading(self, meas: Measurements, timestamp: Optional[datetime] = None) -> Reading:
        """
        Store a validated reading and return it with id/timestamp assigned.
        """
        with self._lock:
            return self.readings.add(meas, timestamp)

    def latest_readings(self, limit: int = 50) -> List[Reading]:
        """
        Return up to ``limit`` readings, newest first.
        """
        with self._lock:
            return self.readings.latest(limit)

    def get_latest(self) -> Optional[Reading]:
        """
        Return the most recent reading, if any.
        """
        with self._lock:
            latest = self.readings.latest(1)
            return latest[0] if latest else None

    # --- Alert API ---
    def add_alert_event(self, event: AlertEvent) -> None:
        with self._lock:
            self.alerts.add_event(event)

    def add_delivery_report(self, report: DeliveryReport) -> None:
        with self._lock:
            self.alerts.add_report(report)

    def recent_alerts(self, limit: int = 10) -> List[AlertEvent]:
        """
        Return up to ``limit`` alert events, newest first.
        """
        with self._lock:
            return self.alerts.recent_events(limit)

    def failed_deliveries(self, limit: int = 10) -> List[DeliveryReport]:
        """
        Return up to ``limit`` failed delivery reports, newest first.
        """
        with self._lock:
            return self.alerts.failed_reports(limit)

    def clear_alert_history(self) -> None:
        with self._lock:
            self.alerts.clear()

    # -------------------------
    # Snapshot properties
    # Return copies to avoid "deque mutated during iteration"
    # -------------------------
    @property
    def alert_events(self) -> List[AlertEvent]:
        """
        Snapshot copy of alert history in insertion order.
        """
        with self._lock:
            return list(self.alerts.events)

    @property
    def delivery_reports(self) -> List[DeliveryReport]:
        """
        Snapshot copy of delivery reports in insertion order.
        """
        with self._lock:
            return list(self.alerts.reports)

    @property
    def reading_count(self) -> int:
        with self._lock:
            return len(self.readings)
