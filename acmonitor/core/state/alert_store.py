from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List

from acmonitor.domain.events import AlertEvent, DeliveryReport


@dataclass
class AlertStore:
    """
    In-memory store for alert history and delivery outcomes.

    This store maintains:
    - a bounded list of alert events (one per consumed transition edge)
    - a bounded list of delivery reports (one per dispatch)

    Notes
    -----
    - This store is intentionally simple and not thread-safe.
      Synchronization is handled by the enclosing `StateStore`.
    """

    max_events: int = 200
    events: Deque[AlertEvent] = field(init=False)
    reports: Deque[DeliveryReport] = field(init=False)

    def __post_init__(self) -> None:
        self.events = deque(maxlen=self.max_events)
        self.reports = deque(maxlen=self.max_events)

    def add_event(self, event: AlertEvent) -> None:
        """
        Append an alert event to the history.
        """
        self.events.append(event)

    def add_report(self, report: DeliveryReport) -> None:
        """
        Append a delivery report.
        """
        self.reports.append(report)

    def recent_events(self, limit: int) -> List[AlertEvent]:
        """
        Return up to ``limit`` alert events, newest first.
        """
        if limit <= 0:
            return []
        return list(reversed(self.events))[:limit]

    def failed_reports(self, limit: int) -> List[DeliveryReport]:
        """
        Return up to ``limit`` failed delivery reports, newest first.
        """
        if limit <= 0:
            return []
        return [r for r in reversed(self.reports) if not r.ok][:limit]

    def clear(self) -> None:
        self.events.clear()
        self.reports.clear()
