from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from acmonitor.core.alarm.classifier import ConditionThresholds


@dataclass(frozen=True)
class ServerConfig:
    """HTTP bind address of the monitor server."""
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass(frozen=True)
class PollerConfig:
    """Dashboard poller settings."""
    base_url: str = "http://127.0.0.1:3000"
    interval_s: float = 2.0
    timeout_s: float = 5.0
    chart_window: int = 20
    max_alerts: int = 10


@dataclass(frozen=True)
class StoreConfig:
    """In-memory history bounds."""
    max_history: int = 5000
    max_alerts: int = 200


@dataclass(frozen=True)
class NotificationConfig:
    """Dispatch policy shared by all notifiers."""
    retry_count: int = 2
    retry_backoff_s: float = 0.5
    max_queue: int = 100
    timezone: str = "Asia/Kolkata"


@dataclass(frozen=True)
class EmailConfigData:
    """SMTP notifier configuration (server + credentials + recipient)."""
    host: str
    recipient: str
    port: int = 587
    sender: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    use_ssl: bool = False
    timeout_s: float = 10.0


@dataclass(frozen=True)
class WebhookConfigData:
    """Webhook notifier configuration (URL + auth)."""
    url: str
    auth_header: Optional[str] = None
    timeout_s: float = 3.0
    verify_tls: bool = True


@dataclass(frozen=True)
class AppConfig:
    """
    Root application configuration loaded from YAML.

    This is the single source of truth for runtime-tunable values, including
    the alert thresholds, so they can be changed without touching code.
    Secrets may be supplied through the environment (or a ``.env`` file)
    instead of the YAML file.
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    thresholds: ConditionThresholds = field(default_factory=ConditionThresholds)
    poller: PollerConfig = field(default_factory=PollerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    email: Optional[EmailConfigData] = None
    webhook: Optional[WebhookConfigData] = None


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("config.yaml must contain a YAML mapping at the root")
    return data


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = raw.get(name) or {}
    if not isinstance(sec, dict):
        raise ValueError(f"config section '{name}' must be a mapping")
    return sec


def _resolve_default_config_path() -> Path:
    """
    Resolve config.yaml location.

    Priority:
    1) APP_CONFIG env var if provided
    2) config.yaml next to the executable (frozen builds)
    3) ./config.yaml in current working directory
    """
    env = os.getenv("APP_CONFIG")
    if env:
        return Path(env).expanduser().resolve()

    exe_dir = Path(sys.executable).resolve().parent
    candidate = exe_dir / "config.yaml"
    if candidate.exists():
        return candidate

    return Path("config.yaml").resolve()


def _parse_email(raw: Dict[str, Any]) -> Optional[EmailConfigData]:
    e = raw.get("email")
    if e is None:
        return None
    if not isinstance(e, dict):
        raise ValueError("config section 'email' must be a mapping")

    recipient = os.getenv("ALERT_RECIPIENT") or e.get("recipient")
    if not recipient:
        raise ValueError("email.recipient is required (or set ALERT_RECIPIENT)")

    username = os.getenv("SMTP_USERNAME") or e.get("username")
    return EmailConfigData(
        host=str(e["host"]),
        port=int(e.get("port", 587)),
        recipient=str(recipient),
        sender=e.get("sender") or username,
        username=username,
        password=os.getenv("SMTP_PASSWORD") or e.get("password"),
        use_tls=bool(e.get("use_tls", True)),
        use_ssl=bool(e.get("use_ssl", False)),
        timeout_s=float(e.get("timeout_s", 10.0)),
    )


def _parse_webhook(raw: Dict[str, Any]) -> Optional[WebhookConfigData]:
    w = raw.get("webhook")
    if w is None:
        return None
    if not isinstance(w, dict):
        raise ValueError("config section 'webhook' must be a mapping")

    auth_header = os.getenv("WEBHOOK_TOKEN") or w.get("auth_header")
    if auth_header and not str(auth_header).startswith("Bearer "):
        auth_header = f"Bearer {auth_header}"

    return WebhookConfigData(
        url=str(w["url"]),
        auth_header=auth_header,
        timeout_s=float(w.get("timeout_s", 3.0)),
        verify_tls=bool(w.get("verify_tls", True)),
    )


def parse_app_config(raw: Dict[str, Any]) -> AppConfig:
    """
    Convert a raw YAML mapping into typed config objects.

    Raises
    ------
    KeyError
        If a required key inside an optional section is missing.
    ValueError
        If a section has the wrong shape or a value cannot be converted.
    """
    s = _section(raw, "server")
    server = ServerConfig(
        host=str(s.get("host", "0.0.0.0")),
        port=int(s.get("port", 3000)),
    )

    t = _section(raw, "thresholds")
    thresholds = ConditionThresholds(
        short_circuit_above=float(t.get("short_circuit_above", 11.0)),
        low_current_equals=float(t.get("low_current_equals", 0.0)),
    )

    p = _section(raw, "poller")
    poller = PollerConfig(
        base_url=str(p.get("base_url", "http://127.0.0.1:3000")).rstrip("/"),
        interval_s=float(p.get("interval_s", 2.0)),
        timeout_s=float(p.get("timeout_s", 5.0)),
        chart_window=int(p.get("chart_window", 20)),
        max_alerts=int(p.get("max_alerts", 10)),
    )
    if poller.interval_s <= 0:
        raise ValueError("poller.interval_s must be > 0")
    if poller.chart_window <= 0:
        raise ValueError("poller.chart_window must be > 0")

    st = _section(raw, "store")
    store = StoreConfig(
        max_history=int(st.get("max_history", 5000)),
        max_alerts=int(st.get("max_alerts", 200)),
    )

    n = _section(raw, "notification")
    notification = NotificationConfig(
        retry_count=int(n.get("retry_count", 2)),
        retry_backoff_s=float(n.get("retry_backoff_s", 0.5)),
        max_queue=int(n.get("max_queue", 100)),
        timezone=str(n.get("timezone", "Asia/Kolkata")),
    )
    if notification.retry_count < 0:
        raise ValueError("notification.retry_count must be >= 0")
    if notification.max_queue <= 0:
        raise ValueError("notification.max_queue must be > 0")

    return AppConfig(
        server=server,
        thresholds=thresholds,
        poller=poller,
        store=store,
        notification=notification,
        email=_parse_email(raw),
        webhook=_parse_webhook(raw),
    )


def load_app_config(path: Optional[str] = None, allow_missing: bool = False) -> AppConfig:
    """
    Load application configuration from YAML and convert into typed config objects.

    A ``.env`` file in the working directory is loaded first, so secrets
    (SMTP_USERNAME, SMTP_PASSWORD, ALERT_RECIPIENT, WEBHOOK_TOKEN) can stay
    out of the YAML file.

    Parameters
    ----------
    path
        Explicit path to config.yaml. If None, uses default resolution.
    allow_missing
        Return defaults instead of raising when the file does not exist.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If config file does not exist and ``allow_missing`` is False.
    ValueError
        If required fields are missing or invalid.
    """
    load_dotenv()

    cfg_path = Path(path).expanduser().resolve() if path else _resolve_default_config_path()
    if not cfg_path.exists():
        if allow_missing:
            return parse_app_config({})
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    return parse_app_config(_read_yaml(cfg_path))
