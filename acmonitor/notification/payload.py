from __future__ import annotations

import html
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from acmonitor.core.alarm.classifier import DEFAULT_THRESHOLDS, ConditionThresholds
from acmonitor.domain.events import AlertEvent
from acmonitor.domain.models import Condition

_TITLES = {
    Condition.SHORT_CIRCUIT: "CRITICAL ALERT: SHORT CIRCUIT DETECTED",
    Condition.LOW_CURRENT: "WARNING: LOW CURRENT DETECTED",
}

_ACTIONS = {
    Condition.SHORT_CIRCUIT: [
        "Immediately inspect the overhead conductor for physical damage",
        "Check for fallen branches or debris on the lines",
        "Verify all connections and insulators",
    ],
    Condition.LOW_CURRENT: [
        "Check the supply side for a tripped breaker or blown fuse",
        "Inspect the conductor for a break (open circuit)",
        "Confirm the meter is still powered and reporting",
    ],
}


@dataclass(frozen=True)
class EmailContent:
    """Rendered alert email."""
    subject: str
    text: str
    html: str


def _iso(ts: datetime) -> str:
    """
    Convert datetime to ISO-8601 string with second precision.
    """
    return ts.isoformat(timespec="seconds")


def format_local_time(ts: datetime, tz_name: str) -> str:
    """
    Format a timestamp for humans in the operator's time zone.

    Naive timestamps are assumed to be UTC. Unknown zone names fall back to UTC.

    Examples
    --------
    ``2026-01-01T04:30:00+00:00`` in ``Asia/Kolkata`` -> ``January 01, 2026, 10:00:00``
    """
    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        zone = timezone.utc  # type: ignore[assignment]
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(zone).strftime("%B %d, %Y, %H:%M:%S")


def build_alert_webhook_payload(ev: AlertEvent) -> Dict[str, Any]:
    """
    Build a webhook payload for an alert event.

    Parameters
    ----------
    ev
        Alert event that triggered the webhook.

    Returns
    -------
    dict
        Webhook payload dictionary with keys: "type", "condition", "message",
        "raised_at" and "reading".
    """
    return {
        "type": "alert_event",
        "condition": ev.condition.value,
        "message": ev.message,
        "raised_at": _iso(ev.raised_at),
        "reading": ev.reading.to_dict(),
    }


def render_alert_email(
    ev: AlertEvent,
    tz_name: str = "Asia/Kolkata",
    thresholds: ConditionThresholds = DEFAULT_THRESHOLDS,
) -> EmailContent:
    """
    Render subject, plain-text and HTML bodies for an alert email.

    Parameters
    ----------
    ev
        Alert event to render.
    tz_name
        IANA zone used for the human-readable timestamp.
    thresholds
        Limits quoted in the body.

    Returns
    -------
    EmailContent
        Subject plus text and HTML alternatives.
    """
    r = ev.reading
    title = _TITLES.get(ev.condition, f"ALERT: {ev.condition.value}")
    when = format_local_time(r.timestamp, tz_name)
    actions = _ACTIONS.get(ev.condition, [])

    if ev.condition is Condition.SHORT_CIRCUIT:
        subject = f"CRITICAL ALERT: Short Circuit Detected - Current: {r.current:.1f}A"
        summary = (
            "A short circuit condition has been detected. The current reading has exceeded "
            f"the safe operating limit of {thresholds.short_circuit_above:g}A."
        )
        current_status = "CRITICAL"
    else:
        subject = f"WARNING: Low Current Detected - Current: {r.current:.1f}A"
        summary = "The current has dropped to zero. Possible open circuit or power loss."
        current_status = "WARNING"

    rows = [
        ("Current", f"{r.current:.1f} A", current_status),
        ("Voltage", f"{r.voltage:.1f} V", "-"),
        ("Power", f"{r.power:.1f} W", "-"),
        ("Timestamp", when, "-"),
        ("Sensor ID", r.id, "-"),
    ]

    text_lines = [title, "", summary, "", ev.message, ""]
    text_lines += [f"{name}: {value}" for name, value, _ in rows]
    if actions:
        text_lines += ["", "Recommended actions:"]
        text_lines += [f"{i}. {a}" for i, a in enumerate(actions, start=1)]
    text = "\n".join(text_lines) + "\n"

    table = "\n".join(
        f"<tr><td>{html.escape(name)}</td><td>{html.escape(value)}</td><td>{html.escape(status)}</td></tr>"
        for name, value, status in rows
    )
    action_items = "\n".join(f"<li>{html.escape(a)}</li>" for a in actions)
    body = f"""<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; background-color: #f5f5f5; padding: 20px;">
  <div style="max-width: 600px; margin: 0 auto; background: white;">
    <div style="background: #dc2626; color: white; padding: 20px; text-align: center;">
      <h1>{html.escape(title)}</h1>
      <p>AC Distribution Overhead Conductor Monitoring System</p>
    </div>
    <div style="padding: 30px;">
      <p><strong>{html.escape(summary)}</strong></p>
      <p>{html.escape(ev.message)}</p>
      <table style="width: 100%; border-collapse: collapse;">
        <tr><th>Parameter</th><th>Value</th><th>Status</th></tr>
{table}
      </table>
      <h3>Recommended Actions:</h3>
      <ol>
{action_items}
      </ol>
    </div>
    <div style="background: #f9fafb; padding: 20px; text-align: center; color: #6b7280;">
      <p>This is an automated alert from the AC Distribution Monitoring System</p>
    </div>
  </div>
</body>
</html>
"""
    return EmailContent(subject=subject, text=text, html=body)
