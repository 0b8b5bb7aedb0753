from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from acmonitor.core.alarm.classifier import DEFAULT_THRESHOLDS, ConditionThresholds
from acmonitor.domain.errors import DeliveryError
from acmonitor.domain.events import AlertEvent
from acmonitor.notification.payload import render_alert_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmtpConfig:
    """
    Configuration for SMTP email notifications.

    Parameters
    ----------
    host
        SMTP server host (e.g. "smtp.gmail.com").
    recipient
        Fixed operator address that receives every alert.
    port
        SMTP server port.
    sender
        From address. Defaults to ``username``.
    username
        Login user. Login is skipped when no credentials are given.
    password
        Login password (typically an app password).
    use_tls
        Upgrade the connection with STARTTLS.
    use_ssl
        Connect with implicit TLS (SMTP_SSL) instead of STARTTLS.
    timeout_s
        Socket timeout in seconds.
    tz_name
        Zone used to format the reading timestamp in the body.
    """

    host: str
    recipient: str
    port: int = 587
    sender: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    use_ssl: bool = False
    timeout_s: float = 10.0
    tz_name: str = "Asia/Kolkata"


class EmailNotifier:
    """
    Notification sender that delivers alert events as HTML email over SMTP.

    Notes
    -----
    - This class performs side effects (network I/O).
    - SMTP and socket errors are surfaced as :class:`DeliveryError`.
    """

    channel = "email"

    def __init__(self, cfg: SmtpConfig, thresholds: ConditionThresholds = DEFAULT_THRESHOLDS):
        self._cfg = cfg
        self._thresholds = thresholds

    @property
    def recipient(self) -> str:
        return self._cfg.recipient

    def build_message(self, event: AlertEvent) -> EmailMessage:
        """
        Render the alert into a multipart (text + HTML) email message.
        """
        content = render_alert_email(event, tz_name=self._cfg.tz_name, thresholds=self._thresholds)

        msg = EmailMessage()
        msg["Subject"] = content.subject
        msg["From"] = f"AC Monitor <{self._cfg.sender or self._cfg.username or self._cfg.recipient}>"
        msg["To"] = self._cfg.recipient
        msg.set_content(content.text)
        msg.add_alternative(content.html, subtype="html")
        return msg

    def notify(self, event: AlertEvent) -> None:
        """
        Send the alert email to the configured recipient.

        Raises
        ------
        DeliveryError
            On connection, authentication or transport failures.
        """
        msg = self.build_message(event)
        cfg = self._cfg

        try:
            if cfg.use_ssl:
                client = smtplib.SMTP_SSL(cfg.host, cfg.port, timeout=cfg.timeout_s)
            else:
                client = smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout_s)

            with client as smtp:
                if cfg.use_tls and not cfg.use_ssl:
                    smtp.starttls()
                if cfg.username and cfg.password:
                    smtp.login(cfg.username, cfg.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP delivery to {cfg.recipient} failed: {e}", channel=self.channel) from e

        logger.info("Alert email sent to %s (%s)", cfg.recipient, event.condition.value)
