"""Translation of SQLAlchemy failures into domain storage errors."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from codescan.domain.errors import CodeConflictError, StorageError

if TYPE_CHECKING:
    from collections.abc import Iterator


@contextmanager
def translate_storage_errors(action: str) -> Iterator[None]:
    """Re-raise constraint violations as ``CodeConflictError``, the rest as ``StorageError``."""

    try:
        yield
    except IntegrityError as exc:
        raise CodeConflictError(f"Store rejected {action}: constraint violated") from exc
    except SQLAlchemyError as exc:
        raise StorageError(f"Store failure during {action}") from exc
