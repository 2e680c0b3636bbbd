"""Configuration for the scan API client."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .env import require_env_vars
from .http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    import httpx

SCAN_CLIENT_TIMEOUT_SECONDS = 10.0
CALLER_ID_HEADER = "X-Caller-Id"

log = getLogger(__name__)


@dataclass(frozen=True)
class ScanClientConfig:
    """Holds the scan API location and the identity the client acts as."""

    base_url: str
    caller_id: str
    resilience: ResilienceConfig


async def log_rejected_response(response: httpx.Response) -> None:
    if response.is_error:
        log.debug(
            "%s %s answered %s",
            response.request.method,
            response.request.url.path,
            response.status_code,
        )


def default_scan_resilience(base_url: str, caller_id: str) -> ResilienceConfig:
    return ResilienceConfig(
        name="codescan-api",
        base_url=base_url,
        timeout_seconds=SCAN_CLIENT_TIMEOUT_SECONDS,
        retry=RetryPolicy(),
        # only public code lookups are cacheable; the API marks listings no-store
        cache=CacheConfig(),
        default_headers={CALLER_ID_HEADER: caller_id},
        response_hooks=(log_rejected_response,),
    )


def get_scan_client_config(*, resilience: ResilienceConfig | None = None) -> ScanClientConfig:
    values = require_env_vars(("CODESCAN_API_URL", "CODESCAN_CALLER_ID"))
    base_url = values["CODESCAN_API_URL"].rstrip("/")
    caller_id = values["CODESCAN_CALLER_ID"]
    return ScanClientConfig(
        base_url=base_url,
        caller_id=caller_id,
        resilience=resilience or default_scan_resilience(base_url, caller_id),
    )
