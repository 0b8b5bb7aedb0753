"""
Unit tests for acmonitor.domain.events.

These tests validate the alert event JSON shape served by ``GET /api/alerts``
and the delivery report status helper.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from acmonitor.domain.events import AlertEvent, DeliveryReport, DeliveryStatus
from acmonitor.domain.models import Condition, Reading


def _mk_event() -> AlertEvent:
    reading = Reading(
        id="abc",
        voltage=229.5,
        current=14.0,
        power=3213.0,
        timestamp=datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc),
    )
    return AlertEvent(
        condition=Condition.SHORT_CIRCUIT,
        reading=reading,
        message="SHORT CIRCUIT DETECTED!",
        raised_at=datetime(2026, 1, 1, 10, 0, 1, tzinfo=timezone.utc),
    )


def test_alert_event_to_dict() -> None:
    d = _mk_event().to_dict()

    assert d["id"] == "abc"
    assert d["type"] == "SHORT_CIRCUIT"
    assert d["current"] == 14.0
    assert d["message"] == "SHORT CIRCUIT DETECTED!"
    assert d["timestamp"] == "2026-01-01T10:00:00+00:00"
    assert d["raised_at"] == "2026-01-01T10:00:01+00:00"


def test_alert_event_is_frozen() -> None:
    ev = _mk_event()
    with pytest.raises(FrozenInstanceError):
        ev.message = "changed"  # type: ignore[misc]


@pytest.mark.parametrize(
    "status, ok",
    [(DeliveryStatus.SENT, True), (DeliveryStatus.FAILED, False)],
)
def test_delivery_report_ok(status: DeliveryStatus, ok: bool) -> None:
    """
    ``ok`` reflects whether any notifier accepted the event.
    """
    rep = DeliveryReport(
        event=_mk_event(),
        status=status,
        attempts=1,
        finished_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    assert rep.ok is ok


def test_delivery_report_to_dict() -> None:
    rep = DeliveryReport(
        event=_mk_event(),
        status=DeliveryStatus.FAILED,
        attempts=3,
        finished_at=datetime(2026, 1, 1, 10, 0, 5, tzinfo=timezone.utc),
        error="smtp down",
    )

    assert rep.to_dict() == {
        "id": "abc",
        "type": "SHORT_CIRCUIT",
        "status": "FAILED",
        "attempts": 3,
        "channel": None,
        "error": "smtp down",
        "finished_at": "2026-01-01T10:00:05+00:00",
    }
