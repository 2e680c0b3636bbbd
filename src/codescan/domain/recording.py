"""Appending scan events to the history."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from codescan.domain.clock import utc_now
from codescan.domain.errors import CodeNotFoundError
from codescan.domain.model import ScanEvent

if TYPE_CHECKING:
    from codescan.domain.clock import Clock
    from codescan.domain.model import CodeId, Identity
    from codescan.domain.ports import UnitOfWorkFactory

log = getLogger(__name__)


def record_scan_event(
    code_id: CodeId,
    caller_id: Identity,
    raw_payload: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = utc_now,
) -> ScanEvent:
    """Insert an immutable scan event for an existing code.

    The code must already exist; this never creates one. ``scanned_at`` never
    precedes the caller's latest recorded scan, so per-caller history stays
    ordered even if the clock steps backwards, and ``sequence`` breaks ties
    between events sharing a timestamp.
    """

    with unit_of_work_factory() as uow:
        if uow.repositories.codes.get(code_id) is None:
            raise CodeNotFoundError(code_id)

        scanned_at = clock()
        latest = uow.repositories.scan_events.latest_scanned_at(caller_id)
        if latest is not None and latest > scanned_at:
            scanned_at = latest
        sequence = uow.repositories.scan_events.next_sequence(caller_id)

        event = ScanEvent(
            code_id=code_id,
            scanned_by_id=caller_id,
            scanned_at=scanned_at,
            raw_payload=raw_payload,
            sequence=sequence,
        )
        uow.repositories.scan_events.add(event)
        uow.commit()

    log.debug("Recorded scan %s of code %s by %s", event.id, code_id, caller_id)
    return event
