from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional

from acmonitor.domain.models import Measurements, Reading


@dataclass
class ReadingStore:
    """
    In-memory history of stored readings.

    Readings are kept in insertion (arrival) order and bounded by
    ``max_history``; the oldest readings are evicted first.

    Notes
    -----
    - Thread-safety is not handled here; the enclosing `StateStore` is
      responsible for synchronization.
    - Queries return newest first, matching the dashboard API.

    Attributes
    ----------
    max_history
        Maximum number of readings retained.
    """

    max_history: int = 5000
    _readings: Deque[Reading] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_history <= 0:
            raise ValueError("max_history must be > 0")
        self._readings = deque(maxlen=self.max_history)

    def add(self, meas: Measurements, timestamp: Optional[datetime] = None) -> Reading:
        """
        Store a new reading, assigning an identifier and a timestamp.

        Parameters
        ----------
        meas
            Validated voltage/current/power.
        timestamp
            Sample time. Defaults to the receipt time (UTC).

        Returns
        -------
        Reading
            The stored, immutable reading.
        """
        reading = Reading(
            id=uuid.uuid4().hex,
            voltage=meas.voltage,
            current=meas.current,
            power=meas.power,
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        self._readings.append(reading)
        return reading

    def latest(self, limit: int = 50) -> List[Reading]:
        """
        Return up to ``limit`` readings, newest first.
        """
        if limit <= 0:
            return []
        out: List[Reading] = []
        for r in reversed(self._readings):
            if len(out) >= limit:
                break
            out.append(r)
        return out

    def __len__(self) -> int:
        return len(self._readings)
