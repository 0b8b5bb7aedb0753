from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from acmonitor.domain.events import AlertEvent, DeliveryReport
from acmonitor.notification.dispatcher import AlertDispatcher

logger = logging.getLogger(__name__)

_STOP = object()


@dataclass(frozen=True)
class NotificationThreadConfig:
    max_queue: int = 100
    poll_timeout_s: float = 0.5


class NotificationWorkerThread:
    """
    Out-of-band alert delivery.

    The ingestion path calls :meth:`emit` right after the gatekeeper returns
    ``should_notify=True`` and moves on; the worker performs the (slow,
    fallible) dispatch. Delivery outcomes are surfaced through the
    dispatcher's logs/report sink and the optional ``on_report`` callback.
    """

    def __init__(
        self,
        dispatcher: AlertDispatcher,
        cfg: NotificationThreadConfig | None = None,
        on_report: Optional[Callable[[DeliveryReport], None]] = None,
    ):
        self._dispatcher = dispatcher
        self._cfg = cfg or NotificationThreadConfig()
        self._on_report = on_report
        self._q: "queue.Queue[object]" = queue.Queue(maxsize=self._cfg.max_queue)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="notification-worker", daemon=True)

    def start(self) -> None:
        if not self._thread.is_alive():
            self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        try:
            self._q.put_nowait(_STOP)
        except queue.Full:
            pass
        if self._thread.is_alive():
            self._thread.join(timeout=2.0)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def pending(self) -> int:
        return self._q.qsize()

    def emit(self, event: AlertEvent) -> bool:
        """
        Queue an alert for delivery without blocking.

        Returns
        -------
        bool
            False when the queue is full and the event was dropped.
        """
        try:
            self._q.put_nowait(event)
        except queue.Full:
            logger.warning("Notification queue full; dropping alert %s for reading %s",
                           event.condition.value, event.reading.id)
            return False
        return True

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                item = self._q.get(timeout=self._cfg.poll_timeout_s)
            except queue.Empty:
                continue

            if item is _STOP:
                break

            try:
                report = self._dispatcher.dispatch(item)  # type: ignore[arg-type]
                if self._on_report is not None:
                    self._on_report(report)
            except Exception:
                logger.exception("Notification worker failed to process alert")
