from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from acmonitor.domain.errors import StorageUnavailable
from acmonitor.domain.models import Reading
from acmonitor.runtime.dashboard_model import DashboardModel

logger = logging.getLogger(__name__)

AlertSink = Callable[[Reading], Dict[str, Any]]


class ReadingSource(Protocol):
    def fetch_latest(self, limit: int = 1) -> List[Reading]:
        ...


@dataclass(frozen=True)
class PollerConfig:
    """
    Parameters
    ----------
    interval_s
        Delay between polling cycles.
    """

    interval_s: float = 2.0


class DashboardPoller:
    """
    Polling loop that keeps a `DashboardModel` current.

    Each cycle:
    1) fetch the single latest reading from the source
    2) skip it if it was already processed (same id)
    3) update the model (metrics, chart, client-side alert list)
    4) forward the reading to the alert sink (server gatekeeper)

    Every new reading is forwarded, not only client-side transitions, so the
    server gatekeeper also sees the NORMAL readings that re-arm it.

    When the source is unavailable the model shows the banner and the
    gatekeeper is not contacted for that cycle.

    Concurrency Model
    -----------------
    - Runs as a daemon thread; waits on the stop event between cycles so
      :meth:`stop` takes effect promptly.
    - :meth:`poll_once` can be called directly (tests, single-shot tools).
    """

    def __init__(
        self,
        source: ReadingSource,
        model: DashboardModel,
        alert_sink: Optional[AlertSink] = None,
        cfg: PollerConfig | None = None,
        stop_event: Optional[threading.Event] = None,
    ):
        self._source = source
        self._model = model
        self._alert_sink = alert_sink
        self._cfg = cfg or PollerConfig()
        self._stop = stop_event or threading.Event()
        self._last_id: Optional[str] = None
        self._thread = threading.Thread(target=self._run, name="dashboard-poller", daemon=True)

    @property
    def model(self) -> DashboardModel:
        return self._model

    def start(self) -> None:
        if not self._thread.is_alive():
            self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: float | None = 2.0) -> None:
        if self._thread.is_alive():
            self._thread.join(timeout=timeout)

    def poll_once(self) -> Optional[Reading]:
        """
        Run one polling cycle.

        Returns
        -------
        Reading or None
            The newly processed reading, or None when nothing new was applied.
        """
        try:
            readings = self._source.fetch_latest(1)
        except StorageUnavailable as e:
            logger.warning("Reading store unavailable: %s", e)
            self._model.mark_unavailable(
                "Failed to connect to the sensor API. Please check the connection and endpoint."
            )
            return None

        if not readings:
            return None

        reading = readings[0]
        if reading.id == self._last_id:
            return None
        self._last_id = reading.id

        self._model.apply(reading)
        if self._alert_sink is not None:
            self._notify(reading)
        return reading

    def _notify(self, reading: Reading) -> None:
        try:
            result = self._alert_sink(reading)  # type: ignore[misc]
        except Exception as e:
            logger.warning("Alert request for reading %s failed: %r", reading.id, e)
            self._model.set_email_status(f"Email service error: {e}")
            return

        if result.get("success"):
            self._model.set_email_status(str(result.get("message", "Alert email sent")))
        elif result.get("error"):
            self._model.set_email_status(f"Failed to send email: {result.get('details') or result['error']}")
        else:
            logger.debug("Server response: %s", result.get("message"))

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("Polling cycle failed")
            self._stop.wait(self._cfg.interval_s)
