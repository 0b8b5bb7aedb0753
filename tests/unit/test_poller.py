"""
Unit tests for DashboardPoller.

``poll_once`` is driven directly with a fake source and a recording alert
sink; the background loop is covered by a short start/stop test.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List

from acmonitor.domain.errors import StorageUnavailable
from acmonitor.domain.models import Reading
from acmonitor.runtime.dashboard_model import DashboardModel
from acmonitor.runtime.poller import DashboardPoller, PollerConfig


def _r(rid: str, current: float) -> Reading:
    return Reading(id=rid, voltage=230.0, current=current, power=230.0 * current,
                   timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc))


class FakeSource:
    """
    Returns scripted responses; an exception instance is raised instead.
    """

    def __init__(self, script: List[Any]) -> None:
        self._script = list(script)
        self.calls = 0

    def fetch_latest(self, limit: int = 1) -> List[Reading]:
        self.calls += 1
        item = self._script.pop(0) if self._script else []
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSink:
    def __init__(self, response: Dict[str, Any]) -> None:
        self.response = response
        self.readings: List[Reading] = []

    def __call__(self, reading: Reading) -> Dict[str, Any]:
        self.readings.append(reading)
        return self.response


def test_poll_once_forwards_every_new_reading() -> None:
    """
    The server gatekeeper decides; the poller forwards normal readings too.
    """
    sink = RecordingSink({"success": False, "notified": False, "message": "No new alert condition, no email sent"})
    src = FakeSource([[_r("a", 5.0)], [_r("b", 12.0)], [_r("c", 12.0)]])
    p = DashboardPoller(src, DashboardModel(), alert_sink=sink)

    for _ in range(3):
        p.poll_once()

    assert [r.id for r in sink.readings] == ["a", "b", "c"]
    assert p.model.email_status == ""
    assert len(p.model.alerts) == 1


def test_success_response_sets_email_status() -> None:
    sink = RecordingSink({"success": True, "message": "Alert queued for delivery"})
    p = DashboardPoller(FakeSource([[_r("a", 12.0)]]), DashboardModel(), alert_sink=sink)

    p.poll_once()

    assert p.model.email_status == "Alert queued for delivery"


def test_same_reading_is_not_reprocessed() -> None:
    """
    The dashboard may fetch the same latest reading several times.
    """
    sink = RecordingSink({"success": True, "message": "ok"})
    same = _r("x", 12.0)
    p = DashboardPoller(FakeSource([[same], [same]]), DashboardModel(), alert_sink=sink)

    assert p.poll_once() is same
    assert p.poll_once() is None
    assert len(sink.readings) == 1
    assert len(p.model.chart) == 1


def test_source_unavailable_sets_banner_and_skips_sink() -> None:
    sink = RecordingSink({})
    p = DashboardPoller(FakeSource([StorageUnavailable("down")]), DashboardModel(), alert_sink=sink)

    assert p.poll_once() is None
    assert p.model.api_error is not None
    assert "Failed to connect" in p.model.api_error
    assert sink.readings == []


def test_empty_store() -> None:
    p = DashboardPoller(FakeSource([[]]), DashboardModel())
    assert p.poll_once() is None


def test_failed_delivery_status() -> None:
    sink = RecordingSink({"success": False, "error": "Failed to send alert email", "details": "smtp down"})
    p = DashboardPoller(FakeSource([[_r("a", 0.0)]]), DashboardModel(), alert_sink=sink)

    p.poll_once()

    assert p.model.email_status == "Failed to send email: smtp down"


def test_sink_exception_sets_status() -> None:
    def broken(reading: Reading) -> Dict[str, Any]:
        raise ConnectionError("refused")

    p = DashboardPoller(FakeSource([[_r("a", 12.0)]]), DashboardModel(), alert_sink=broken)
    p.poll_once()

    assert p.model.email_status.startswith("Email service error:")


def test_background_loop_start_stop() -> None:
    polled = threading.Event()

    class Src(FakeSource):
        def fetch_latest(self, limit: int = 1) -> List[Reading]:
            polled.set()
            return []

    p = DashboardPoller(Src([]), DashboardModel(), cfg=PollerConfig(interval_s=0.01))
    p.start()
    try:
        assert polled.wait(timeout=2.0)
    finally:
        p.stop()
        p.join(timeout=2.0)
