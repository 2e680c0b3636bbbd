"""Request-scoped collaborators for the scan API."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, Request

from codescan.config import CALLER_ID_HEADER
from codescan.domain.scan_ingest import require_identity

if TYPE_CHECKING:
    from codescan.domain.clock import Clock
    from codescan.domain.ports import UnitOfWorkFactory
    from codescan.domain.resolution import CodeDefaults

type IdentityResolver = Callable[[Request], str | None]


@dataclass(slots=True, frozen=True)
class ApiDependencies:
    unit_of_work_factory: UnitOfWorkFactory
    defaults: CodeDefaults
    page_size: int
    clock: Clock
    identity_resolver: IdentityResolver


def header_identity(request: Request) -> str | None:
    """Read the caller id forwarded by the upstream identity provider."""

    return request.headers.get(CALLER_ID_HEADER)


def get_dependencies(request: Request) -> ApiDependencies:
    return request.app.state.dependencies


Dependencies = Annotated[ApiDependencies, Depends(get_dependencies)]


def require_caller(request: Request, deps: Dependencies) -> str:
    return require_identity(deps.identity_resolver(request))


Caller = Annotated[str, Depends(require_caller)]
