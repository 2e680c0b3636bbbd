"""Tables for codes and scan events, mapped imperatively onto the domain dataclasses."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)

from codescan.domain.model import Code, ScanEvent
from codescan.domain.normalization import CODE_ID_MAX_LENGTH

if TYPE_CHECKING:
    from sqlalchemy import Dialect

log = getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    """Stores instants in UTC and always hands back aware datetimes.

    SQLite drops the offset on write, so naive values read back are UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Refusing to store naive datetime {value!r}")
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=UTC)


mapper_registry = orm.registry(
    metadata=MetaData(
        naming_convention={
            "pk": "pk_%(table_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        }
    )
)

codes_table = Table(
    "codes",
    mapper_registry.metadata,
    Column("id", String(CODE_ID_MAX_LENGTH), primary_key=True),
    Column("system_acronym", String, nullable=False),
    Column("size", String, nullable=False),
    Column("year", Integer, nullable=False),
    Column("owner_id", String, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
)

scan_events_table = Table(
    "scan_events",
    mapper_registry.metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("code_id", String(CODE_ID_MAX_LENGTH), ForeignKey("codes.id"), nullable=False),
    Column("scanned_by_id", String, nullable=False),
    Column("scanned_at", UTCDateTime(), nullable=False),
    Column("raw_payload", Text, nullable=False),
    Column("sequence", Integer, nullable=False, default=0, server_default="0"),
    Index("ix_scan_events_scanned_by_id_scanned_at", "scanned_by_id", "scanned_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Map ``Code`` and ``ScanEvent`` onto their tables; safe to call repeatedly."""

    log.debug("Mapping domain classes")
    mapper_registry.map_imperatively(Code, codes_table)
    mapper_registry.map_imperatively(ScanEvent, scan_events_table)
    return mapper_registry
