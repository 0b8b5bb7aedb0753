"""
Unit tests for DashboardModel (client-side view state).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from acmonitor.domain.models import Condition, Reading
from acmonitor.runtime.dashboard_model import DashboardModel

_T0 = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def _r(i: int, current: float) -> Reading:
    return Reading(
        id=f"r{i}",
        voltage=230.0,
        current=current,
        power=230.0 * current,
        timestamp=_T0 + timedelta(seconds=i),
    )


def test_apply_tracks_transitions() -> None:
    m = DashboardModel()
    results = [m.apply(_r(i, c)) for i, c in enumerate([5.0, 12.0, 12.0, 5.0, 0.0])]

    assert results == [None, Condition.SHORT_CIRCUIT, None, None, Condition.LOW_CURRENT]
    assert [a.condition for a in m.alerts] == [Condition.LOW_CURRENT, Condition.SHORT_CIRCUIT]


def test_chart_window_is_bounded() -> None:
    m = DashboardModel(chart_window=3)
    for i in range(5):
        m.apply(_r(i, 5.0))

    assert [p.time for p in m.chart] == ["10:00:02", "10:00:03", "10:00:04"]


def test_alerts_are_bounded_newest_first() -> None:
    m = DashboardModel(max_alerts=2)
    for i, c in enumerate([12.0, 0.0, 12.0]):
        m.apply(_r(i, c))

    assert [a.id for a in m.alerts] == ["r2", "r1"]


def test_status_level() -> None:
    m = DashboardModel()
    assert m.status_level() == "OK"

    m.apply(_r(0, 12.0))
    assert m.status_level() == "CRITICAL"

    m.apply(_r(1, 0.0))
    assert m.status_level() == "WARNING"


def test_unavailable_banner_is_cleared_by_next_reading() -> None:
    m = DashboardModel()
    m.apply(_r(0, 5.0))
    m.mark_unavailable("down")

    assert m.api_error == "down"
    assert m.latest is not None and m.latest.id == "r0"

    m.apply(_r(1, 5.0), now=_T0)
    assert m.api_error is None
    assert m.last_update == _T0
