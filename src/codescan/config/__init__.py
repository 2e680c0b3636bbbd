"""Application configuration helpers."""

from __future__ import annotations

from .client import CALLER_ID_HEADER, ScanClientConfig, get_scan_client_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .ingest import IngestConfig, get_ingest_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CALLER_ID_HEADER",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "IngestConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ScanClientConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_ingest_config",
    "get_scan_client_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
