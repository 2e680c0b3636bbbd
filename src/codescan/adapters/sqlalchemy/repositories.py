"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select

from codescan.adapters.sqlalchemy.errors import translate_storage_errors
from codescan.adapters.sqlalchemy.mappings import codes_table, scan_events_table
from codescan.domain.model import Code, CodeSummary, ScanEvent, ScanRecord

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import Row
    from sqlalchemy.orm import Session

    from codescan.domain.model import CodeId, Identity


class SqlAlchemyCodeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Code) -> None:
        self.session.add(entity)

    def get(self, code_id: CodeId) -> Code | None:
        with translate_storage_errors(f"lookup of code {code_id}"):
            return self.session.get(Code, code_id)


class SqlAlchemyScanEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ScanEvent) -> None:
        self.session.add(entity)

    def latest_scanned_at(self, scanned_by_id: Identity) -> datetime | None:
        stmt = select(func.max(scan_events_table.c.scanned_at)).where(
            scan_events_table.c.scanned_by_id == scanned_by_id
        )
        with translate_storage_errors("latest scan lookup"):
            return self.session.execute(stmt).scalar_one_or_none()

    def next_sequence(self, scanned_by_id: Identity) -> int:
        stmt = select(func.coalesce(func.max(scan_events_table.c.sequence), 0)).where(
            scan_events_table.c.scanned_by_id == scanned_by_id
        )
        with translate_storage_errors("scan sequence lookup"):
            return self.session.execute(stmt).scalar_one() + 1

    def list_for_caller(self, scanned_by_id: Identity, *, limit: int) -> list[ScanRecord]:
        stmt = (
            select(
                scan_events_table.c.id,
                scan_events_table.c.code_id,
                scan_events_table.c.scanned_at,
                scan_events_table.c.raw_payload,
                codes_table.c.system_acronym,
                codes_table.c.size,
                codes_table.c.year,
            )
            .select_from(scan_events_table)
            .outerjoin(codes_table, codes_table.c.id == scan_events_table.c.code_id)
            .where(scan_events_table.c.scanned_by_id == scanned_by_id)
            .order_by(
                scan_events_table.c.scanned_at.desc(),
                scan_events_table.c.sequence.desc(),
            )
            .limit(limit)
        )
        with translate_storage_errors("scan listing"):
            rows = self.session.execute(stmt).all()
        return [_record_from_row(row) for row in rows]


def _record_from_row(row: Row[tuple[object, ...]]) -> ScanRecord:
    mapping = row._mapping  # noqa: SLF001
    summary: CodeSummary | None = None
    if mapping["system_acronym"] is not None:
        summary = CodeSummary(
            id=cast("str", mapping["code_id"]),
            system_acronym=cast("str", mapping["system_acronym"]),
            size=cast("str", mapping["size"]),
            year=cast("int", mapping["year"]),
        )
    return ScanRecord(
        id=mapping["id"],
        code_id=mapping["code_id"],
        scanned_at=mapping["scanned_at"],
        raw_payload=mapping["raw_payload"],
        code=summary,
    )


if TYPE_CHECKING:
    from codescan.domain.ports.persistence import CodeRepository, ScanEventRepository

    _session_stub = cast("Session", object())
    _code_repo: CodeRepository = SqlAlchemyCodeRepository(_session_stub)
    _event_repo: ScanEventRepository = SqlAlchemyScanEventRepository(_session_stub)
