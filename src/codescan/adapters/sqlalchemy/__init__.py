"""SQLAlchemy persistence for codes and scan events."""

from __future__ import annotations

from .mappings import codes_table, mapper_registry, scan_events_table, start_mappers
from .repositories import SqlAlchemyCodeRepository, SqlAlchemyScanEventRepository

__all__ = [
    "SqlAlchemyCodeRepository",
    "SqlAlchemyScanEventRepository",
    "codes_table",
    "mapper_registry",
    "scan_events_table",
    "start_mappers",
]
