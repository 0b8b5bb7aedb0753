"""
Unit tests for acmonitor.ingest.validation.

Invalid input must be rejected at the boundary so it never reaches the
gatekeeper. We verify field-level errors and the optional id/timestamp
handling of full readings.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from acmonitor.domain.errors import ValidationError
from acmonitor.ingest.validation import parse_measurements, parse_reading

GOOD = {"voltage": 230.0, "current": 5.0, "power": 1150.0}


def test_parse_measurements_accepts_ints_and_floats() -> None:
    m = parse_measurements({"voltage": 230, "current": 5.5, "power": 1265})
    assert (m.voltage, m.current, m.power) == (230.0, 5.5, 1265.0)
    assert isinstance(m.voltage, float)


@pytest.mark.parametrize("missing", ["voltage", "current", "power"])
def test_parse_measurements_missing_field(missing: str) -> None:
    body = {k: v for k, v in GOOD.items() if k != missing}
    with pytest.raises(ValidationError) as ei:
        parse_measurements(body)
    assert ei.value.field == missing


@pytest.mark.parametrize("bad", ["5", None, True, [1], {"v": 1}])
def test_parse_measurements_rejects_non_numbers(bad: object) -> None:
    with pytest.raises(ValidationError) as ei:
        parse_measurements({**GOOD, "current": bad})
    assert ei.value.field == "current"


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_parse_measurements_rejects_non_finite(bad: float) -> None:
    with pytest.raises(ValidationError):
        parse_measurements({**GOOD, "power": bad})


@pytest.mark.parametrize("body", [None, [], "text", 42])
def test_parse_measurements_rejects_non_mapping(body: object) -> None:
    with pytest.raises(ValidationError) as ei:
        parse_measurements(body)
    assert ei.value.field is None


def test_validation_error_is_value_error() -> None:
    """
    Callers that only know about ValueError still catch validation failures.
    """
    with pytest.raises(ValueError):
        parse_measurements({})


def test_parse_reading_uses_supplied_id_and_timestamp() -> None:
    r = parse_reading({**GOOD, "_id": "abc", "timestamp": "2026-01-01T10:00:00Z"})

    assert r.id == "abc"
    assert r.timestamp == datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def test_parse_reading_accepts_plain_id_key() -> None:
    assert parse_reading({**GOOD, "id": 7}).id == "7"


def test_parse_reading_fills_missing_id_and_timestamp() -> None:
    now = datetime(2026, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    r = parse_reading(GOOD, now=now)

    assert r.id
    assert r.timestamp == now


def test_parse_reading_generates_unique_ids() -> None:
    assert parse_reading(GOOD).id != parse_reading(GOOD).id


def test_parse_reading_rejects_bad_timestamp() -> None:
    with pytest.raises(ValidationError) as ei:
        parse_reading({**GOOD, "timestamp": "yesterday"})
    assert ei.value.field == "timestamp"
