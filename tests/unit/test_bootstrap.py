"""
Unit tests for the composition root and runtime supervisor.
"""

from __future__ import annotations

from acmonitor.bootstrap import build_dashboard_system, build_notifiers, build_server_system
from acmonitor.core.alarm.classifier import ConditionThresholds
from acmonitor.core.config.yaml_config import AppConfig, EmailConfigData, WebhookConfigData
from acmonitor.notification.email_notifier import EmailNotifier
from acmonitor.notification.webhook_notifier import WebhookNotifier


def _cfg(**kw) -> AppConfig:
    return AppConfig(
        email=EmailConfigData(host="smtp.example.com", recipient="ops@example.com"),
        webhook=WebhookConfigData(url="http://hooks.local/alarm"),
        **kw,
    )


def test_build_notifiers_order() -> None:
    notifiers = build_notifiers(_cfg())

    assert isinstance(notifiers[0], EmailNotifier)
    assert isinstance(notifiers[1], WebhookNotifier)


def test_build_notifiers_none_configured() -> None:
    assert build_notifiers(AppConfig()) == []


def test_build_server_system_wires_routes() -> None:
    wiring = build_server_system(cfg=_cfg(thresholds=ConditionThresholds(short_circuit_above=20.0)))

    assert wiring.controller.recipients == ["ops@example.com", "http://hooks.local/alarm"]
    assert wiring.controller.gatekeeper.thresholds.short_circuit_above == 20.0

    resp = wiring.app.test_client().get("/health")
    assert resp.status_code == 200


def test_server_runtime_start_stop() -> None:
    wiring = build_server_system(cfg=AppConfig())
    thread = wiring.controller.notifier_thread
    assert thread is not None

    wiring.runtime.start()
    assert thread.is_alive()
    wiring.runtime.stop()
    assert not thread.is_alive()


def test_build_dashboard_system() -> None:
    wiring = build_dashboard_system(cfg=AppConfig())
    try:
        assert wiring.poller.model is wiring.model
        assert wiring.model.latest is None
    finally:
        wiring.client.close()


def test_server_send_alert_goes_through_worker() -> None:
    """
    The assembled server hands new alert edges to the notification worker.
    """
    wiring = build_server_system(cfg=AppConfig())
    thread = wiring.controller.notifier_thread
    assert thread is not None

    # worker not started: the queued event stays pending
    resp = wiring.app.test_client().post(
        "/send-alert", json={"voltage": 230.0, "current": 12.5, "power": 2875.0}
    )

    assert resp.status_code == 202
    assert resp.get_json()["queued"] is True
    assert thread.pending() == 1
