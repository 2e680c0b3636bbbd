"""FastAPI application factory for the scan API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from codescan.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyScanUnitOfWork,
    is_started,
    shutdown,
    startup,
)
from codescan.api.dependencies import ApiDependencies, IdentityResolver, header_identity
from codescan.api.routes import router
from codescan.api.schema import ErrorPayload
from codescan.config import get_ingest_config
from codescan.domain.clock import utc_now
from codescan.domain.errors import AuthError, InvalidPayloadError, ScanPipelineError
from codescan.domain.resolution import CodeDefaults

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from codescan.config import IngestConfig
    from codescan.domain.clock import Clock
    from codescan.domain.ports import UnitOfWorkFactory

log = getLogger(__name__)

INVALID_BODY_MESSAGE = "Missing or invalid rawPayload"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def _error_response(status_code: int, error: str, reason: str | None = None) -> JSONResponse:
    payload = ErrorPayload(error=error, reason=reason)
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(by_alias=True, exclude_none=True),
    )


async def _handle_invalid_payload(_request: Request, exc: InvalidPayloadError) -> JSONResponse:
    log.info("Rejected scan payload: %s", exc)
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), exc.reason.value)


async def _handle_request_validation(
    _request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    log.info("Rejected malformed request body: %s", exc)
    return _error_response(status.HTTP_400_BAD_REQUEST, INVALID_BODY_MESSAGE)


async def _handle_auth(_request: Request, exc: AuthError) -> JSONResponse:
    log.info("Rejected unauthenticated request: %s", exc)
    return _error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")


async def _handle_pipeline_failure(request: Request, exc: ScanPipelineError) -> JSONResponse:
    log.error("Scan pipeline failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


_EXCEPTION_HANDLERS: tuple[tuple[type[Exception], Callable[..., Awaitable[JSONResponse]]], ...] = (
    (InvalidPayloadError, _handle_invalid_payload),
    (RequestValidationError, _handle_request_validation),
    (AuthError, _handle_auth),
    (ScanPipelineError, _handle_pipeline_failure),
)


@asynccontextmanager
async def _managed_storage(_app: FastAPI) -> AsyncIterator[None]:
    started_here = not is_started()
    if started_here:
        startup()
    try:
        yield
    finally:
        if started_here:
            shutdown()


def create_app(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    ingest_config: IngestConfig | None = None,
    identity_resolver: IdentityResolver = header_identity,
    clock: Clock = utc_now,
) -> FastAPI:
    """Build the scan API.

    Without an explicit ``unit_of_work_factory`` the app manages the SQLAlchemy
    adapter itself, starting it on application startup.
    """

    config = ingest_config or get_ingest_config()
    app = FastAPI(
        title="codescan",
        lifespan=_managed_storage if unit_of_work_factory is None else None,
    )
    app.state.dependencies = ApiDependencies(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyScanUnitOfWork,
        defaults=CodeDefaults(
            system_acronym=config.default_system_acronym,
            size=config.default_size,
        ),
        page_size=config.page_size,
        clock=clock,
        identity_resolver=identity_resolver,
    )

    for exc_class, handler in _EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, handler)

    app.include_router(router)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
