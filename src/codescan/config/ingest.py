"""Defaults applied by the scan ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, optional_int_env_var

DEFAULT_SYSTEM_ACRONYM = "TMGS"
DEFAULT_SIZE = "unspecified"
DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True, slots=True)
class IngestConfig:
    default_system_acronym: str = DEFAULT_SYSTEM_ACRONYM
    default_size: str = DEFAULT_SIZE
    page_size: int = DEFAULT_PAGE_SIZE


def get_ingest_config() -> IngestConfig:
    return IngestConfig(
        default_system_acronym=optional_env_var(
            "CODESCAN_DEFAULT_SYSTEM_ACRONYM", DEFAULT_SYSTEM_ACRONYM
        ),
        default_size=optional_env_var("CODESCAN_DEFAULT_SIZE", DEFAULT_SIZE),
        page_size=optional_int_env_var("CODESCAN_PAGE_SIZE", DEFAULT_PAGE_SIZE),
    )
