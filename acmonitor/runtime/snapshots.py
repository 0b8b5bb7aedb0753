from __future__ import annotations

from typing import List, Tuple

from acmonitor.runtime.dashboard_model import DashboardModel

MetricRow = Tuple[str, str, str]
AlertRow = Tuple[str, str, str, str]
ChartRow = Tuple[str, str, str, str]


def metric_rows(model: DashboardModel) -> List[MetricRow]:
    """
    Rows for the metrics panel: (name, value, status).
    """
    r = model.latest
    if r is None:
        return []

    level = model.status_level()
    return [
        ("Voltage", f"{r.voltage:.1f} V", "-"),
        ("Current", f"{r.current:.2f} A", level),
        ("Power", f"{r.power:.1f} W", "-"),
        ("Timestamp", r.timestamp.strftime("%H:%M:%S"), "-"),
    ]


def alert_rows(model: DashboardModel, limit: int = 10) -> List[AlertRow]:
    rows: List[AlertRow] = []
    for a in model.alerts[:limit]:
        rows.append(
            (
                a.timestamp.strftime("%H:%M:%S"),
                a.condition.value,
                f"{a.current:.2f}",
                a.message,
            )
        )
    return rows


def chart_rows(model: DashboardModel) -> List[ChartRow]:
    """
    Chart buffer as text rows, oldest first.
    """
    return [
        (p.time, f"{p.voltage:.1f}", f"{p.current:.2f}", f"{p.power:.1f}")
        for p in model.chart
    ]


def render_text(model: DashboardModel) -> str:
    """
    Render a compact console view of the dashboard.
    """
    lines: List[str] = []
    if model.api_error:
        lines.append(f"!! {model.api_error}")

    for name, value, status in metric_rows(model):
        lines.append(f"{name:<10} {value:>14}  {status}")

    if model.email_status:
        lines.append(f"email: {model.email_status}")

    for ts, cond, current, msg in alert_rows(model, limit=3):
        lines.append(f"[{ts}] {cond} {current}A {msg}")

    return "\n".join(lines)
