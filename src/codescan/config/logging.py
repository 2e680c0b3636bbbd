"""Root logger setup for the CLI and the API server."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# per-request chatter from the HTTP client stack
QUIET_LOGGERS = ("httpx", "hishel")


def log_level_from_env(default: int = logging.INFO) -> int:
    """Read ``CODESCAN_LOG_LEVEL`` as a level name such as ``DEBUG``."""

    name = optional_env_var("CODESCAN_LOG_LEVEL", logging.getLevelName(default)).upper()
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ConfigurationError(f"CODESCAN_LOG_LEVEL must be a logging level, got {name!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Set up the root logger; ``level`` defaults to ``CODESCAN_LOG_LEVEL`` or INFO.

    The HTTP client loggers stay at WARNING unless DEBUG is requested.
    """

    resolved = log_level_from_env() if level is None else level
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, force=force)
    client_level = resolved if resolved <= logging.DEBUG else max(resolved, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(client_level)
