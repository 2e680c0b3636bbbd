from __future__ import annotations

from datetime import UTC, datetime, timedelta
from functools import partial

import pytest

from codescan.domain.errors import CodeNotFoundError
from codescan.domain.recording import record_scan_event
from tests.helpers.scans import InMemoryScanStore, SteppingClock, make_code


def test_record_appends_event_for_existing_code(memory_store: InMemoryScanStore) -> None:
    memory_store.codes["A6F3HW7L"] = make_code("A6F3HW7L")
    clock = SteppingClock()

    event = record_scan_event(
        "A6F3HW7L",
        "alice",
        "https://host/s/a6f3hw7l",
        unit_of_work_factory=memory_store.unit_of_work,
        clock=clock,
    )

    assert memory_store.events == [event]
    assert event.code_id == "A6F3HW7L"
    assert event.scanned_by_id == "alice"
    assert event.raw_payload == "https://host/s/a6f3hw7l"
    assert event.scanned_at == datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def test_record_never_creates_codes(memory_store: InMemoryScanStore) -> None:
    with pytest.raises(CodeNotFoundError) as excinfo:
        record_scan_event(
            "UNKNOWN1",
            "alice",
            "UNKNOWN1",
            unit_of_work_factory=memory_store.unit_of_work,
        )

    assert excinfo.value.code_id == "UNKNOWN1"
    assert memory_store.codes == {}
    assert memory_store.events == []


def test_record_appends_independent_events_for_rescans(memory_store: InMemoryScanStore) -> None:
    memory_store.codes["A6F3HW7L"] = make_code("A6F3HW7L")
    clock = SteppingClock()

    first = record_scan_event(
        "A6F3HW7L", "alice", "A6F3HW7L", unit_of_work_factory=memory_store.unit_of_work, clock=clock
    )
    second = record_scan_event(
        "A6F3HW7L", "alice", "a6f3hw7l", unit_of_work_factory=memory_store.unit_of_work, clock=clock
    )

    assert first.id != second.id
    assert [event.raw_payload for event in memory_store.events] == ["A6F3HW7L", "a6f3hw7l"]


def test_record_keeps_caller_history_monotonic(memory_store: InMemoryScanStore) -> None:
    memory_store.codes["A6F3HW7L"] = make_code("A6F3HW7L")
    later = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
    backwards = SteppingClock(later, step=-timedelta(minutes=5))

    record = partial(
        record_scan_event,
        unit_of_work_factory=memory_store.unit_of_work,
        clock=backwards,
    )

    first = record("A6F3HW7L", "alice", "A6F3HW7L")
    second = record("A6F3HW7L", "alice", "A6F3HW7L")
    other = record("A6F3HW7L", "bob", "A6F3HW7L")

    assert first.scanned_at == later
    assert second.scanned_at == later
    assert other.scanned_at == later - timedelta(minutes=10)
    assert (first.sequence, second.sequence, other.sequence) == (1, 2, 1)
