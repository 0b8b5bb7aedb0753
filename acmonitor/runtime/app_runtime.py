from __future__ import annotations

from typing import Optional

from acmonitor.notification.notification_thread import NotificationWorkerThread
from acmonitor.runtime.poller import DashboardPoller


class AppRuntime:
    """
    Thread supervisor for the background workers.

    This class owns the lifecycles (start/stop/join) of:

    1) NotificationWorkerThread (I/O)
       - consumes AlertEvents queued by the controller
       - dispatches them through the configured notifiers

    2) DashboardPoller (I/O + view state)
       - fetches the latest reading every interval
       - updates the dashboard model and calls the alert sink on transitions

    Either worker may be absent (the server process runs only the
    notification worker; the dashboard process runs only the poller).

    Notes
    -----
    - Threads are started consumer-first: the notification worker must be
      running before the poller can produce alerts.
    - Stop is cooperative; all threads are daemons.
    """

    def __init__(
        self,
        poller: Optional[DashboardPoller] = None,
        notifier: Optional[NotificationWorkerThread] = None,
    ):
        self._poller = poller
        self._notifier = notifier

    def start(self) -> None:
        if self._notifier is not None:
            self._notifier.start()
        if self._poller is not None:
            self._poller.start()

    def stop(self) -> None:
        if self._poller is not None:
            self._poller.stop()
            self._poller.join(timeout=2.0)
        if self._notifier is not None:
            self._notifier.stop()
