from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, request
from flask.json import jsonify

from acmonitor.domain.errors import ValidationError
from acmonitor.services.controller import MonitoringController

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def _limit_arg(default: int) -> int:
    try:
        limit = int(request.args.get("limit", default))
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, MAX_LIMIT))


def create_app(controller: MonitoringController) -> Flask:
    """
    Build the monitor HTTP service.

    Routes
    ------
    - ``POST /data``        store a {voltage, current, power} sample
    - ``GET /api/data``     newest readings first (``?limit=``, default 50)
    - ``POST /send-alert``  run a reading through the gatekeeper; a new edge is queued
                            for delivery (202), or sent inline when no worker runs
    - ``GET /api/alerts``   recent alert events and failed deliveries
    - ``GET /health``       liveness
    """
    app = Flask(__name__)
    app.config["MONITOR_CONTROLLER"] = controller

    @app.after_request
    def _cors(resp):
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return resp

    @app.errorhandler(ValidationError)
    def _invalid(e: ValidationError):
        return jsonify({"error": str(e), "field": e.field}), 400

    @app.post("/data")
    def ingest():
        body = request.get_json(silent=True)
        reading = controller.ingest(body)
        return jsonify(reading.to_dict()), 201

    @app.get("/api/data")
    def latest():
        readings = controller.latest(_limit_arg(DEFAULT_LIMIT))
        return jsonify([r.to_dict() for r in readings]), 200

    @app.post("/send-alert")
    def send_alert():
        body = request.get_json(silent=True)
        outcome = controller.check_alert(body, wait=False)
        condition = outcome.decision.condition.value

        if not outcome.decision.should_notify:
            return jsonify({
                "success": False,
                "notified": False,
                "condition": condition,
                "message": "No new alert condition, no email sent",
            }), 200

        if outcome.delivery_failed:
            return jsonify({
                "success": False,
                "notified": True,
                "condition": condition,
                "error": "Failed to send alert email",
                "details": outcome.report.error if outcome.report else None,
            }), 502

        if outcome.queued:
            return jsonify({
                "success": True,
                "notified": True,
                "queued": True,
                "condition": condition,
                "message": "Alert queued for delivery",
                "recipient": ", ".join(controller.recipients),
            }), 202

        return jsonify({
            "success": True,
            "notified": True,
            "condition": condition,
            "message": "Alert email sent successfully",
            "recipient": ", ".join(controller.recipients),
        }), 200

    @app.get("/api/alerts")
    def recent_alerts():
        limit = _limit_arg(10)
        events = controller.alerts(limit)
        failed = controller.failed_deliveries(limit)
        return jsonify({
            "count": len(events),
            "alerts": [e.to_dict() for e in events],
            "failed_deliveries": [r.to_dict() for r in failed],
        }), 200

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"}), 200

    return app


def main(config_path: Optional[str] = None) -> None:
    from acmonitor.bootstrap import build_server_system

    wiring = build_server_system(config_path=config_path)
    wiring.runtime.start()
    try:
        # IMPORTANT for EXE: do NOT use debug=True in production
        wiring.app.run(host=wiring.config.server.host, port=wiring.config.server.port, debug=False)
    finally:
        wiring.runtime.stop()
