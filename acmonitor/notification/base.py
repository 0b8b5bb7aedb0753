from __future__ import annotations

from typing import Protocol

from acmonitor.domain.events import AlertEvent


class Notifier(Protocol):
    """
    Protocol interface for alert delivery.

    Any notifier implementation can be used if it provides a 'notify(event)'
    method and a 'channel' name. The event carries both the condition and the
    reading, so rendering and recipient are entirely the notifier's concern.
    This enables dependency inversion and makes dispatch easy to test with
    fakes/mocks.

    Attributes
    ----------
    channel
        Short channel name used in logs and delivery reports.

    Methods
    -------
    notify(event)
        Deliver an alert event.
    """

    channel: str

    def notify(self, event: AlertEvent) -> None:
        """
        Deliver an alert event.

        Parameters
        ----------
        event
            The alert event to deliver.

        Raises
        ------
        DeliveryError
            If the event could not be delivered.
        """
        ...
