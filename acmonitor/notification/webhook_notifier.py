from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from acmonitor.domain.errors import DeliveryError
from acmonitor.domain.events import AlertEvent
from acmonitor.notification.payload import build_alert_webhook_payload


@dataclass(frozen=True)
class WebhookConfig:
    """
    Configuration for webhook-based notifications.

    Parameters
    ----------
    url
        Target webhook URL.
    timeout_s
        HTTP request timeout in seconds.
    verify_tls
        Whether to verify TLS certificates.
    auth_header
        Optional Authorization header value (e.g., Bearer token).
    """

    url: str
    timeout_s: float = 2.0
    verify_tls: bool = True
    auth_header: Optional[str] = None


class WebhookNotifier:
    """
    Notification sender that delivers alert events via HTTP webhook.

    This notifier sends a JSON payload to a configured webhook endpoint
    using an HTTP POST request.

    Notes
    -----
    - This class performs side effects (network I/O).
    - Network and HTTP status errors are surfaced as :class:`DeliveryError`.
    """

    channel = "webhook"

    def __init__(self, cfg: WebhookConfig):
        """
        Initialize the webhook notifier.

        Parameters
        ----------
        cfg
            Webhook configuration.
        """
        self._cfg = cfg

    @property
    def recipient(self) -> str:
        return self._cfg.url

    def notify(self, event: AlertEvent) -> None:
        """
        Send an alert event to the configured webhook endpoint.

        Parameters
        ----------
        event
            Alert event rendered with :func:`build_alert_webhook_payload`.

        Raises
        ------
        DeliveryError
            If the request fails or the response status indicates an error.
        """
        headers = {"Content-Type": "application/json"}
        if self._cfg.auth_header:
            headers["Authorization"] = self._cfg.auth_header

        try:
            r = requests.post(
                self._cfg.url,
                json=build_alert_webhook_payload(event),
                headers=headers,
                timeout=self._cfg.timeout_s,
                verify=self._cfg.verify_tls,
            )
            r.raise_for_status()
        except requests.RequestException as e:
            raise DeliveryError(f"Webhook delivery to {self._cfg.url} failed: {e}", channel=self.channel) from e
