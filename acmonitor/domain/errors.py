"""
Error taxonomy.

Only the boundaries can fail: input validation upstream of the gatekeeper,
notification delivery downstream of it, and reaching the reading store.
The gatekeeper's decision itself has no failure channel.
"""

from __future__ import annotations

from typing import Optional


class MonitorError(Exception):
    """Base class for all monitor errors."""


class ValidationError(MonitorError, ValueError):
    """
    A reading payload is malformed or has missing/non-numeric fields.

    Parameters
    ----------
    message
        Human-readable description.
    field
        Name of the offending field, if one can be singled out.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DeliveryError(MonitorError):
    """
    A notifier failed to deliver an alert (network, auth or transport).

    Parameters
    ----------
    message
        Human-readable description.
    channel
        Notifier channel name (e.g. "email", "webhook").
    """

    def __init__(self, message: str, channel: str = "unknown"):
        super().__init__(message)
        self.channel = channel


class StorageUnavailable(MonitorError):
    """The reading store (or the API in front of it) cannot be reached."""
