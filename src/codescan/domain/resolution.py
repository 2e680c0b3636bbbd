"""Find-or-create resolution of canonical code ids to code rows."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from codescan.domain.clock import utc_now
from codescan.domain.errors import CodeConflictError, StorageError
from codescan.domain.model import Code

if TYPE_CHECKING:
    from codescan.domain.clock import Clock
    from codescan.domain.model import CodeId, Identity
    from codescan.domain.ports import UnitOfWorkFactory

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CodeDefaults:
    """Classifier values stamped onto a code when it is first created."""

    system_acronym: str
    size: str

    def with_overrides(self, *, system_acronym: str | None, size: str | None) -> CodeDefaults:
        """Return defaults where non-blank overrides replace the configured values."""

        return CodeDefaults(
            system_acronym=_non_blank(system_acronym) or self.system_acronym,
            size=_non_blank(size) or self.size,
        )


def resolve_code(
    code_id: CodeId,
    caller_id: Identity,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    defaults: CodeDefaults,
    clock: Clock = utc_now,
) -> Code:
    """Return the code for ``code_id``, creating it for ``caller_id`` if unseen.

    Lookup is global: the first caller to scan an id owns it, later callers reuse
    the existing row and never modify it. The lookup and insert are not locked;
    the store's primary key decides a creation race and the loser re-fetches
    the winner's row.
    """

    with unit_of_work_factory() as uow:
        existing = uow.repositories.codes.get(code_id)
        if existing is not None:
            log.debug("Reusing existing code %s", code_id)
            return existing

        now = clock()
        code = Code(
            id=code_id,
            system_acronym=defaults.system_acronym,
            size=defaults.size,
            year=now.year,
            owner_id=caller_id,
            created_at=now,
        )
        uow.repositories.codes.add(code)
        try:
            uow.commit()
        except CodeConflictError:
            uow.rollback()
            log.info("Code %s was created concurrently; reusing the stored row", code_id)
        else:
            log.info("Created code %s for owner %s", code_id, caller_id)
            return code

    return _refetch_winner(code_id, unit_of_work_factory)


def _refetch_winner(code_id: CodeId, unit_of_work_factory: UnitOfWorkFactory) -> Code:
    with unit_of_work_factory() as uow:
        winner = uow.repositories.codes.get(code_id)
    if winner is None:
        raise StorageError(f"Code {code_id} conflicted on insert but could not be re-read")
    return winner


def _non_blank(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
