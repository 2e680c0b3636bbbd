from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003

import pytest

from codescan.config import (
    CALLER_ID_HEADER,
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    get_database_config,
    get_ingest_config,
    get_scan_client_config,
    get_storage_config,
    require_env_var,
    require_env_vars,
)
from codescan.config.logging import log_level_from_env
from codescan.config.storage import DEFAULT_DB_FILENAME


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_ingest_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CODESCAN_DEFAULT_SYSTEM_ACRONYM",
        "CODESCAN_DEFAULT_SIZE",
        "CODESCAN_PAGE_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)

    config = get_ingest_config()

    assert config.default_system_acronym == "TMGS"
    assert config.default_size == "unspecified"
    assert config.page_size == 50


def test_ingest_config_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODESCAN_DEFAULT_SYSTEM_ACRONYM", " LAB ")
    monkeypatch.setenv("CODESCAN_PAGE_SIZE", "20")

    config = get_ingest_config()

    assert config.default_system_acronym == "LAB"
    assert config.page_size == 20


@pytest.mark.parametrize("value", ["many", "0", "-3"])
def test_ingest_config_rejects_bad_page_size(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("CODESCAN_PAGE_SIZE", value)

    with pytest.raises(ConfigurationError, match="CODESCAN_PAGE_SIZE"):
        get_ingest_config()


def test_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("CODESCAN_DATA_DIR", str(custom))

    config = get_storage_config()

    assert config.data_dir == custom
    assert config.http_cache_path == custom.resolve() / "http_cache.db"
    assert custom.is_dir()


def test_database_config_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")
    monkeypatch.setenv("CODESCAN_SQL_ECHO", "true")

    config = get_database_config()

    assert config.uri == "sqlite:///override.db"
    assert config.echo


def test_database_config_creates_data_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("CODESCAN_DATA_DIR", str(tmp_path / "data-dir"))

    uri = get_database_config().uri

    expected_path = (tmp_path / "data-dir" / DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_scan_client_config_requires_url_and_identity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CODESCAN_API_URL", raising=False)
    monkeypatch.delenv("CODESCAN_CALLER_ID", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        get_scan_client_config()

    assert "CODESCAN_API_URL" in str(exc.value)
    assert "CODESCAN_CALLER_ID" in str(exc.value)


def test_scan_client_config_builds_resilience(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODESCAN_API_URL", "https://scan.example.org/")
    monkeypatch.setenv("CODESCAN_CALLER_ID", " alice ")

    config = get_scan_client_config()

    assert config.base_url == "https://scan.example.org"
    assert config.caller_id == "alice"
    assert config.resilience.base_url == "https://scan.example.org"
    assert config.resilience.default_headers == {CALLER_ID_HEADER: "alice"}
    assert "POST" not in config.resilience.retry.allowed_methods


def test_log_level_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODESCAN_LOG_LEVEL", "debug")

    assert log_level_from_env() == logging.DEBUG


def test_unknown_log_level_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODESCAN_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError, match="CODESCAN_LOG_LEVEL"):
        log_level_from_env()


def test_configure_logging_keeps_http_client_quiet() -> None:
    configure_logging(level=logging.INFO, force=True)
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging(level=logging.DEBUG, force=True)
    assert logging.getLogger("httpx").level == logging.DEBUG
