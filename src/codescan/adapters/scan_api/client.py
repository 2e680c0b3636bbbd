"""HTTP client for the scan API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import TypeAdapter, ValidationError

from codescan.adapters.http_resilience import ResilientClient
from codescan.api.schema import ErrorPayload, PublicCodePayload, ScanRecordPayload, ScanResponse
from codescan.config import get_scan_client_config
from codescan.domain.errors import ScanPipelineError

from .translator import record_from_payload, record_from_scan_response

if TYPE_CHECKING:
    from collections.abc import Callable

    from codescan.config import ResilienceConfig, ScanClientConfig
    from codescan.domain.model import ScanRecord
    from codescan.domain.ports import ScanApi

log = getLogger(__name__)

SCAN_EVENTS_PATH = "/api/scan-events"
CODES_PATH = "/api/codes"

_RECORD_LIST = TypeAdapter(list[ScanRecordPayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class ScanApiError(ScanPipelineError):
    """Raised when the scan API is unreachable or answers with an error."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


@dataclass(slots=True)
class HttpScanApi:
    config: ScanClientConfig = field(default_factory=get_scan_client_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def submit_scan(
        self,
        raw_payload: str,
        *,
        size: str | None = None,
        system_acronym: str | None = None,
    ) -> ScanRecord:
        body: dict[str, str] = {"rawPayload": raw_payload}
        if size is not None:
            body["size"] = size
        if system_acronym is not None:
            body["systemAcronym"] = system_acronym
        payload = asyncio.run(self._request("POST", SCAN_EVENTS_PATH, json=body))
        response = self._validate(ScanResponse.model_validate, payload)
        return record_from_scan_response(raw_payload, response)

    def list_scans(self) -> list[ScanRecord]:
        payload = asyncio.run(self._request("GET", SCAN_EVENTS_PATH))
        records = self._validate(_RECORD_LIST.validate_python, payload)
        return [record_from_payload(record) for record in records]

    def lookup_code(self, code_id: str) -> PublicCodePayload:
        payload = asyncio.run(self._request("GET", f"{CODES_PATH}/{code_id.strip()}"))
        return self._validate(PublicCodePayload.model_validate, payload)

    async def _request(self, method: str, path: str, *, json: object = None) -> object:
        url = f"{self.config.resilience.base_url or self.config.base_url}{path}"
        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.request(method, url, json=json)
            except httpx.HTTPError as exc:
                log.warning("Scan API request %s %s failed: %s", method, path, exc)
                raise ScanApiError(f"Scan API unreachable: {exc}") from exc

        if response.is_error:
            raise self._error_from(response)
        return response.json()

    @staticmethod
    def _error_from(response: httpx.Response) -> ScanApiError:
        try:
            error = ErrorPayload.model_validate(response.json())
        except (ValueError, ValidationError):
            message = f"Scan API returned HTTP {response.status_code}"
            return ScanApiError(message, status_code=response.status_code)
        log.error("Scan API error %s: %s", response.status_code, error.error)
        return ScanApiError(error.error, status_code=response.status_code, reason=error.reason)

    @staticmethod
    def _validate[T](validator: Callable[[object], T], payload: object) -> T:
        try:
            return validator(payload)
        except ValidationError as exc:
            raise ScanApiError("Unexpected scan API response payload") from exc


if TYPE_CHECKING:
    _api_check: ScanApi = HttpScanApi()
