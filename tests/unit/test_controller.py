"""
Unit tests for MonitoringController.

The controller is wired with real store/gatekeeper/dispatcher objects and a
fake notifier, so these tests cover the full server-side alert flow:
- validation happens before the gatekeeper
- only transition edges create alert events and deliveries
- a failed delivery does not re-arm the gatekeeper
"""

from __future__ import annotations

from typing import List

import pytest

from acmonitor.core.alarm.gatekeeper import NotificationGatekeeper
from acmonitor.core.state_store import StateStore
from acmonitor.domain.errors import DeliveryError, ValidationError
from acmonitor.domain.events import AlertEvent
from acmonitor.domain.models import Condition
from acmonitor.notification.dispatcher import AlertDispatcher
from acmonitor.notification.notification_thread import NotificationThreadConfig, NotificationWorkerThread
from acmonitor.services.controller import MonitoringController


class FakeNotifier:
    """
    Records delivered events; can be switched to fail.
    """

    channel = "email"
    recipient = "ops@example.com"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.events: List[AlertEvent] = []

    def notify(self, event: AlertEvent) -> None:
        if self.fail:
            raise DeliveryError("smtp down", channel=self.channel)
        self.events.append(event)


def _mk_controller(notifier: FakeNotifier, with_thread: bool = False) -> MonitoringController:
    store = StateStore()
    dispatcher = AlertDispatcher([notifier], retry_count=0, report_sink=store.add_delivery_report)
    thread = NotificationWorkerThread(dispatcher) if with_thread else None
    return MonitoringController(
        store=store,
        gatekeeper=NotificationGatekeeper(),
        dispatcher=dispatcher,
        notifier_thread=thread,
    )


def _body(current: float) -> dict:
    return {"voltage": 230.0, "current": current, "power": 230.0 * current}


def test_ingest_stores_and_returns_reading() -> None:
    c = _mk_controller(FakeNotifier())
    r = c.ingest(_body(5.0))

    assert c.latest(1) == [r]


def test_ingest_rejects_invalid_body() -> None:
    c = _mk_controller(FakeNotifier())
    with pytest.raises(ValidationError):
        c.ingest({"voltage": 230.0})
    assert c.latest() == []


def test_check_alert_notifies_only_on_edges() -> None:
    n = FakeNotifier()
    c = _mk_controller(n)

    outcomes = [c.check_alert(_body(x)) for x in [5.0, 12.0, 12.0, 0.0]]

    assert [o.decision.should_notify for o in outcomes] == [False, True, False, True]
    assert [e.condition for e in n.events] == [Condition.SHORT_CIRCUIT, Condition.LOW_CURRENT]
    assert outcomes[1].report is not None and outcomes[1].report.ok
    assert outcomes[0].event is None


def test_check_alert_records_events_and_reports() -> None:
    c = _mk_controller(FakeNotifier())
    c.check_alert(_body(12.0))

    (ev,) = c.alerts()
    assert ev.condition is Condition.SHORT_CIRCUIT
    assert ev.message.startswith("SHORT CIRCUIT DETECTED!")
    assert len(c.store.delivery_reports) == 1


def test_failed_delivery_does_not_rearm() -> None:
    """
    After a failed email the same fault must stay suppressed.
    """
    n = FakeNotifier(fail=True)
    c = _mk_controller(n)

    first = c.check_alert(_body(12.0))
    second = c.check_alert(_body(12.0))

    assert first.decision.should_notify is True
    assert first.delivery_failed is True
    assert second.decision.should_notify is False
    assert len(c.alerts()) == 1


def test_invalid_body_does_not_touch_gatekeeper() -> None:
    c = _mk_controller(FakeNotifier())

    with pytest.raises(ValidationError):
        c.check_alert({"voltage": 230.0, "current": "12", "power": 1.0})

    # the first real fault still notifies
    assert c.check_alert(_body(12.0)).decision.should_notify is True


def test_check_alert_queues_when_not_waiting() -> None:
    c = _mk_controller(FakeNotifier(), with_thread=True)

    outcome = c.check_alert(_body(0.0), wait=False)

    assert outcome.event is not None
    assert outcome.report is None
    assert outcome.queued is True
    assert c.notifier_thread is not None and c.notifier_thread.pending() == 1


def test_full_queue_yields_failed_report() -> None:
    """
    A dropped alert is recorded as a failed delivery, not reported as queued.
    """
    store = StateStore()
    dispatcher = AlertDispatcher([FakeNotifier()], retry_count=0, report_sink=store.add_delivery_report)
    c = MonitoringController(
        store=store,
        gatekeeper=NotificationGatekeeper(),
        dispatcher=dispatcher,
        notifier_thread=NotificationWorkerThread(dispatcher, NotificationThreadConfig(max_queue=1)),
    )

    first = c.check_alert(_body(12.0), wait=False)
    second = c.check_alert(_body(0.0), wait=False)

    assert first.queued is True
    assert second.queued is False
    assert second.delivery_failed is True
    assert second.report is not None and second.report.error == "notification queue full"
    assert [r.event.condition for r in c.failed_deliveries()] == [Condition.LOW_CURRENT]


def test_without_thread_wait_false_dispatches_inline() -> None:
    n = FakeNotifier()
    c = _mk_controller(n)

    outcome = c.check_alert(_body(12.0), wait=False)

    assert outcome.queued is False
    assert outcome.report is not None and outcome.report.ok
    assert len(n.events) == 1


def test_recipients_come_from_dispatcher() -> None:
    assert _mk_controller(FakeNotifier()).recipients == ["ops@example.com"]
