from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from flask import Flask

from acmonitor.core.alarm.gatekeeper import ConditionCell, NotificationGatekeeper
from acmonitor.core.config.yaml_config import AppConfig, load_app_config
from acmonitor.core.state.alert_store import AlertStore
from acmonitor.core.state.reading_store import ReadingStore
from acmonitor.core.state_store import StateStore
from acmonitor.notification.base import Notifier
from acmonitor.notification.dispatcher import AlertDispatcher
from acmonitor.notification.email_notifier import EmailNotifier, SmtpConfig
from acmonitor.notification.notification_thread import NotificationThreadConfig, NotificationWorkerThread
from acmonitor.notification.webhook_notifier import WebhookConfig, WebhookNotifier
from acmonitor.runtime.api_client import ApiClientConfig, MonitorApiClient
from acmonitor.runtime.app_runtime import AppRuntime
from acmonitor.runtime.dashboard_model import DashboardModel
from acmonitor.runtime.poller import DashboardPoller, PollerConfig
from acmonitor.services.controller import MonitoringController
from monitor_server.monitor_server import create_app


@dataclass(frozen=True)
class ServerWiring:
    """Everything the server process needs to run."""
    config: AppConfig
    store: StateStore
    controller: MonitoringController
    runtime: AppRuntime
    app: Flask


@dataclass(frozen=True)
class DashboardWiring:
    """Everything the dashboard process needs to run."""
    config: AppConfig
    client: MonitorApiClient
    model: DashboardModel
    poller: DashboardPoller
    runtime: AppRuntime


def build_notifiers(cfg: AppConfig) -> List[Notifier]:
    notifiers: List[Notifier] = []

    if cfg.email is not None:
        e = cfg.email
        notifiers.append(
            EmailNotifier(
                SmtpConfig(
                    host=e.host,
                    port=e.port,
                    recipient=e.recipient,
                    sender=e.sender,
                    username=e.username,
                    password=e.password,
                    use_tls=e.use_tls,
                    use_ssl=e.use_ssl,
                    timeout_s=e.timeout_s,
                    tz_name=cfg.notification.timezone,
                ),
                thresholds=cfg.thresholds,
            )
        )

    if cfg.webhook is not None:
        w = cfg.webhook
        notifiers.append(
            WebhookNotifier(
                WebhookConfig(
                    url=w.url,
                    auth_header=w.auth_header,
                    timeout_s=w.timeout_s,
                    verify_tls=w.verify_tls,
                )
            )
        )

    return notifiers


def build_server_system(config_path: Optional[str] = None, cfg: Optional[AppConfig] = None) -> ServerWiring:
    cfg = cfg or load_app_config(config_path)

    # --- STATE ---
    store = StateStore(
        readings=ReadingStore(max_history=cfg.store.max_history),
        alerts=AlertStore(max_events=cfg.store.max_alerts),
    )

    # --- GATEKEEPER (one cell per monitored circuit) ---
    gatekeeper = NotificationGatekeeper(cell=ConditionCell(), thresholds=cfg.thresholds)

    # --- NOTIFICATIONS ---
    dispatcher = AlertDispatcher(
        notifiers=build_notifiers(cfg),
        retry_count=cfg.notification.retry_count,
        retry_backoff_s=cfg.notification.retry_backoff_s,
        report_sink=store.add_delivery_report,
    )
    notifier_thread = NotificationWorkerThread(
        dispatcher,
        NotificationThreadConfig(max_queue=cfg.notification.max_queue),
    )

    # --- CONTROLLER ---
    controller = MonitoringController(
        store=store,
        gatekeeper=gatekeeper,
        dispatcher=dispatcher,
        notifier_thread=notifier_thread,
    )

    runtime = AppRuntime(notifier=notifier_thread)
    app = create_app(controller)

    return ServerWiring(config=cfg, store=store, controller=controller, runtime=runtime, app=app)


def build_dashboard_system(config_path: Optional[str] = None, cfg: Optional[AppConfig] = None) -> DashboardWiring:
    cfg = cfg or load_app_config(config_path, allow_missing=True)

    client = MonitorApiClient(ApiClientConfig(base_url=cfg.poller.base_url, timeout_s=cfg.poller.timeout_s))
    model = DashboardModel(
        thresholds=cfg.thresholds,
        chart_window=cfg.poller.chart_window,
        max_alerts=cfg.poller.max_alerts,
    )
    poller = DashboardPoller(
        source=client,
        model=model,
        alert_sink=client.send_alert,
        cfg=PollerConfig(interval_s=cfg.poller.interval_s),
    )
    runtime = AppRuntime(poller=poller)

    return DashboardWiring(config=cfg, client=client, model=model, poller=poller, runtime=runtime)
