"""Async HTTP client used by the scan API adapter.

Layers, from the wire up: the network (or an injected) transport, an
``httpx_retries`` transport replaying idempotent reads, an optional ``hishel``
response cache, and an optional ``aiolimiter`` throttle around each call.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from codescan.config import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from codescan.config import CacheConfig, ResilienceConfig, RetryPolicy

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        allowed_methods=policy.allowed_methods,
        status_forcelist=policy.status_forcelist,
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
    )


def cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None or not config.enabled:
        return None
    if config.in_memory:
        database_path = ":memory:"
    else:
        database_path = str(config.path or get_storage_config().http_cache_path)
    return AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)


def _build_client(
    config: ResilienceConfig,
    transport: httpx.AsyncBaseTransport | None,
) -> httpx.AsyncClient:
    options: dict[str, Any] = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(transport=transport, retry=build_retry(config.retry)),
        "headers": dict(config.default_headers or {}),
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.response_hooks:
        options["event_hooks"] = {"response": list(config.response_hooks)}

    storage = cache_storage(config.cache)
    if storage is None:
        return httpx.AsyncClient(**options)
    return AsyncCacheClient(storage=storage, **options)


class ResilientClient:
    """Async context manager wrapping one configured ``httpx.AsyncClient``.

    ``transport`` replaces the network underneath the retry layer, e.g. an
    ``httpx.ASGITransport`` serving an in-process app or an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = _build_client(config, transport)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: object = None,
    ) -> httpx.Response:
        log.debug("%s %s via %s", method, url, self.config.name)
        if self._limiter is None:
            return await self._client.request(method, url, json=json)
        async with self._limiter:
            return await self._client.request(method, url, json=json)
