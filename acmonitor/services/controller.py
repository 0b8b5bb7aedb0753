from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from acmonitor.core.alarm.classifier import describe
from acmonitor.core.alarm.gatekeeper import NotificationGatekeeper
from acmonitor.core.state_store import StateStore
from acmonitor.domain.events import AlertEvent, DeliveryReport, DeliveryStatus
from acmonitor.domain.models import GateDecision, Reading
from acmonitor.ingest.validation import parse_measurements, parse_reading
from acmonitor.notification.dispatcher import AlertDispatcher
from acmonitor.notification.notification_thread import NotificationWorkerThread

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertOutcome:
    """
    Result of one alert check.

    Parameters
    ----------
    reading
        The validated reading that was checked.
    decision
        Gatekeeper decision for the reading.
    event
        Alert event raised for a transition, else None.
    report
        Delivery report when dispatch ran synchronously (or the queue
        rejected the event), else None.
    queued
        True when the event was handed to the notification thread.
    """

    reading: Reading
    decision: GateDecision
    event: Optional[AlertEvent] = None
    report: Optional[DeliveryReport] = None
    queued: bool = False

    @property
    def delivery_failed(self) -> bool:
        return self.report is not None and not self.report.ok


@dataclass
class MonitoringController:
    """
    Orchestrate ingestion, queries and alert checks.

    Responsibilities
    ----------------
    - Validate incoming bodies at the boundary (invalid input never reaches
      the gatekeeper).
    - Store readings and serve the newest ones.
    - Run each checked reading through the gatekeeper exactly once and, on a
      transition, record the alert and hand it to the notification layer.

    Notes
    -----
    This controller contains orchestration logic only. Classification and
    edge detection live in the gatekeeper; delivery lives in the dispatcher.
    Delivery failures are reported in the outcome and never re-arm the
    gatekeeper.

    Parameters
    ----------
    store
        Thread-safe state facade.
    gatekeeper
        Edge-triggered notification gatekeeper.
    dispatcher
        Synchronous dispatcher used when ``wait=True``.
    notifier_thread
        Optional background worker used when ``wait=False``. Without one,
        dispatch is always synchronous.
    """

    store: StateStore
    gatekeeper: NotificationGatekeeper
    dispatcher: AlertDispatcher
    notifier_thread: Optional[NotificationWorkerThread] = None

    @property
    def recipients(self) -> List[str]:
        return self.dispatcher.recipients

    def ingest(self, body: Any) -> Reading:
        """
        Validate an ingestion body and store it.

        Raises
        ------
        ValidationError
            If voltage/current/power are missing or not finite numbers.
        """
        meas = parse_measurements(body)
        reading = self.store.add_reading(meas)
        logger.debug("Stored reading %s (%.2fV %.2fA %.2fW)",
                     reading.id, reading.voltage, reading.current, reading.power)
        return reading

    def latest(self, limit: int = 50) -> List[Reading]:
        return self.store.latest_readings(limit)

    def alerts(self, limit: int = 10) -> List[AlertEvent]:
        return self.store.recent_alerts(limit)

    def failed_deliveries(self, limit: int = 10) -> List[DeliveryReport]:
        """
        Return up to ``limit`` failed delivery reports, newest first.
        """
        return self.store.failed_deliveries(limit)

    def check_alert(self, body: Union[Reading, Any], wait: bool = True) -> AlertOutcome:
        """
        Decide whether a reading opens a new alert edge and, if so, dispatch it.

        Parameters
        ----------
        body
            A `Reading` or a JSON body to validate into one.
        wait
            Dispatch synchronously and include the report. When False and a
            notification thread is configured, the alert is queued instead;
            a full queue yields a FAILED report without dispatching.

        Raises
        ------
        ValidationError
            If the body is invalid (the gatekeeper is not invoked).
        """
        reading = body if isinstance(body, Reading) else parse_reading(body)

        decision = self.gatekeeper.decide(reading)
        if not decision.should_notify:
            return AlertOutcome(reading=reading, decision=decision)

        # The edge is already consumed at this point; nothing below can undo it.
        event = AlertEvent(
            condition=decision.condition,
            reading=reading,
            message=describe(decision.condition, reading, self.gatekeeper.thresholds),
            raised_at=datetime.now(timezone.utc),
        )
        self.store.add_alert_event(event)
        logger.info("Alert raised: %s for reading %s (%.3fA)",
                    decision.condition.value, reading.id, reading.current)

        if not wait and self.notifier_thread is not None:
            if self.notifier_thread.emit(event):
                return AlertOutcome(reading=reading, decision=decision, event=event, queued=True)
            report = DeliveryReport(
                event=event,
                status=DeliveryStatus.FAILED,
                attempts=0,
                finished_at=datetime.now(timezone.utc),
                error="notification queue full",
            )
            self.store.add_delivery_report(report)
            return AlertOutcome(reading=reading, decision=decision, event=event, report=report)

        report = self.dispatcher.dispatch(event)
        return AlertOutcome(reading=reading, decision=decision, event=event, report=report)
