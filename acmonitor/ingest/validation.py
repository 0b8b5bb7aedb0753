from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Mapping, Optional

from acmonitor.domain.errors import ValidationError
from acmonitor.domain.models import Measurements, Reading

MEASUREMENT_FIELDS = ("voltage", "current", "power")


def _str_to_dt(s: str) -> datetime:
    """
    Convert an ISO-8601 datetime string to a datetime object.

    A trailing ``Z`` (as produced by JavaScript's ``toISOString``) is accepted.

    Raises
    ------
    ValueError
        If the input is not a valid ISO formatted datetime string.
    """
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def _number(obj: Mapping[str, Any], name: str) -> float:
    if name not in obj:
        raise ValidationError(f"Missing field: {name}", field=name)

    value = obj[name]
    # bool is an int subclass; "true" is not a current.
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"Field {name} must be a number, got {type(value).__name__}", field=name)

    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"Field {name} must be finite", field=name)
    return value


def _require_mapping(obj: Any) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ValidationError("Invalid sensor data: expected a JSON object")
    return obj


def parse_measurements(obj: Any) -> Measurements:
    """
    Validate an ingestion body into `Measurements`.

    Parameters
    ----------
    obj
        JSON-decoded request body.

    Returns
    -------
    Measurements
        Voltage, current and power as finite floats.

    Raises
    ------
    ValidationError
        If the body is not a mapping or a field is missing/non-numeric/non-finite.
    """
    m = _require_mapping(obj)
    return Measurements(
        voltage=_number(m, "voltage"),
        current=_number(m, "current"),
        power=_number(m, "power"),
    )


def parse_reading(obj: Any, now: Optional[datetime] = None) -> Reading:
    """
    Validate a full reading body (as posted to the alert-check endpoint).

    ``_id`` (or ``id``) and ``timestamp`` are optional: a fresh identifier and
    the receipt time are assigned when they are absent.

    Parameters
    ----------
    obj
        JSON-decoded request body.
    now
        Receipt time to use when no timestamp is supplied.

    Raises
    ------
    ValidationError
        If measurements are invalid or the timestamp cannot be parsed.
    """
    m = _require_mapping(obj)
    meas = parse_measurements(m)

    raw_id = m.get("_id", m.get("id"))
    reading_id = str(raw_id) if raw_id not in (None, "") else uuid.uuid4().hex

    raw_ts = m.get("timestamp")
    if raw_ts in (None, ""):
        ts = now or datetime.now(timezone.utc)
    elif isinstance(raw_ts, datetime):
        ts = raw_ts
    else:
        try:
            ts = _str_to_dt(str(raw_ts))
        except ValueError as e:
            raise ValidationError(f"Invalid timestamp: {raw_ts!r}", field="timestamp") from e

    return Reading(
        id=reading_id,
        voltage=meas.voltage,
        current=meas.current,
        power=meas.power,
        timestamp=ts,
    )
