"""Reading configuration values from the process environment."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


def _present(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip() or None


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Return every named variable, reporting all blank or unset ones at once."""

    found = {name: _present(name) for name in names}
    absent = sorted(name for name, value in found.items() if value is None)
    if absent:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(absent)}")
    return {name: value for name, value in found.items() if value is not None}


def require_env_var(name: str) -> str:
    return require_env_vars((name,))[name]


def optional_env_var(name: str, default: str) -> str:
    return _present(name) or default


def optional_int_env_var(name: str, default: int) -> int:
    """Read a positive integer, falling back to ``default`` when unset."""

    raw = _present(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value
