"""
Stress tests for StateStore under concurrent writers and readers.

Writers add readings while readers take snapshots; the store must never raise
"deque mutated during iteration" and must keep its bound.
"""

from __future__ import annotations

import threading
from typing import List

import pytest

from acmonitor.core.state.reading_store import ReadingStore
from acmonitor.core.state_store import StateStore
from acmonitor.domain.models import Measurements

WRITERS = 8
PER_WRITER = 500
MAX_HISTORY = 1000


@pytest.mark.stress
def test_concurrent_add_and_query() -> None:
    store = StateStore(readings=ReadingStore(max_history=MAX_HISTORY))
    errors: List[BaseException] = []
    stop = threading.Event()

    def writer() -> None:
        for i in range(PER_WRITER):
            store.add_reading(Measurements(voltage=230.0, current=float(i % 13), power=0.0))

    def reader() -> None:
        try:
            while not stop.is_set():
                rows = store.latest_readings(100)
                assert len(rows) <= 100
                store.get_latest()
        except BaseException as e:  # noqa: BLE001 - collected and asserted below
            errors.append(e)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    writers = [threading.Thread(target=writer) for _ in range(WRITERS)]
    for t in readers + writers:
        t.start()
    for t in writers:
        t.join(timeout=10.0)
    stop.set()
    for t in readers:
        t.join(timeout=5.0)

    assert errors == []
    assert store.reading_count == MAX_HISTORY
