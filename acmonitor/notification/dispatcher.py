"""
Synchronous alert dispatch with retries.

The dispatcher is the only place where notifier failures are turned into
outcomes. It never raises and never touches gatekeeper state: by the time an
event reaches it, the transition edge has already been consumed.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from acmonitor.domain.errors import DeliveryError
from acmonitor.domain.events import AlertEvent, DeliveryReport, DeliveryStatus
from acmonitor.notification.base import Notifier

logger = logging.getLogger(__name__)

ReportSink = Callable[[DeliveryReport], None]


class AlertDispatcher:
    """
    Deliver alert events through one or more notifiers.

    Notifiers are tried in order; the first one that succeeds ends the
    dispatch. Each notifier gets ``retry_count`` retries with exponential
    backoff before the next one is tried.

    Parameters
    ----------
    notifiers
        Ordered notifier list. An empty list makes every dispatch FAILED.
    retry_count
        Retries per notifier after the first attempt.
    retry_backoff_s
        Base backoff; attempt ``n`` waits ``retry_backoff_s * 2**n``.
    report_sink
        Optional callback receiving every report (e.g. ``StateStore.add_delivery_report``).
    sleep
        Injected for tests.
    """

    def __init__(
        self,
        notifiers: Sequence[Notifier],
        retry_count: int = 2,
        retry_backoff_s: float = 0.5,
        report_sink: Optional[ReportSink] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._notifiers: List[Notifier] = list(notifiers)
        self._retry_count = max(0, retry_count)
        self._retry_backoff_s = retry_backoff_s
        self._report_sink = report_sink
        self._sleep = sleep

    @property
    def recipients(self) -> List[str]:
        return [str(getattr(n, "recipient", n.channel)) for n in self._notifiers]

    def dispatch(self, event: AlertEvent) -> DeliveryReport:
        """
        Deliver one alert event.

        Returns
        -------
        DeliveryReport
            SENT with the delivering channel, or FAILED with the last error.
        """
        attempts = 0
        last_error = "no notifiers configured"

        for notifier in self._notifiers:
            for attempt in range(self._retry_count + 1):
                attempts += 1
                try:
                    notifier.notify(event)
                except Exception as e:
                    # Notifiers are expected to raise DeliveryError; anything else is
                    # still a failed attempt for this event.
                    last_error = str(e) if isinstance(e, DeliveryError) else repr(e)
                    logger.warning(
                        "Delivery attempt %d via %s failed for %s: %s",
                        attempt + 1, notifier.channel, event.reading.id, e,
                    )
                    if attempt < self._retry_count:
                        self._sleep(self._retry_backoff_s * (2 ** attempt))
                    continue

                report = DeliveryReport(
                    event=event,
                    status=DeliveryStatus.SENT,
                    attempts=attempts,
                    finished_at=datetime.now(timezone.utc),
                    channel=notifier.channel,
                )
                logger.info("Alert %s for reading %s delivered via %s",
                            event.condition.value, event.reading.id, notifier.channel)
                self._record(report)
                return report

        report = DeliveryReport(
            event=event,
            status=DeliveryStatus.FAILED,
            attempts=attempts,
            finished_at=datetime.now(timezone.utc),
            error=last_error,
        )
        logger.warning("Giving up on alert %s for reading %s after %d attempts: %s",
                       event.condition.value, event.reading.id, attempts, last_error)
        self._record(report)
        return report

    def _record(self, report: DeliveryReport) -> None:
        if self._report_sink is None:
            return
        try:
            self._report_sink(report)
        except Exception:
            logger.exception("Delivery report sink failed")
