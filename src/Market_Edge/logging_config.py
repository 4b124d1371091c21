"""Root logger setup shared by the ``market-edge`` CLI and the web app.

Level resolution, highest priority first: ``verbose`` flag, ``quiet`` flag,
explicit ``level`` argument, ``LOG_LEVEL`` env var, INFO. Package subtrees
can be tuned separately with ``LOG_LEVEL_<AREA>`` (for example
``LOG_LEVEL_STREAMING=DEBUG``).
"""

from __future__ import annotations

import logging
import os
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# LOG_LEVEL_<AREA> env suffix -> logger subtree
AREA_LOGGERS: Final[dict[str, str]] = {
    "SERVICES": "Market_Edge.services",
    "PROVIDERS": "Market_Edge.services.providers",
    "STREAMING": "Market_Edge.streaming",
    "WEB": "Market_Edge.web",
    "ANALYSIS": "Market_Edge.analysis",
}

# Chatty third-party loggers held at WARNING: the request middleware covers
# access logging and httpx would otherwise log every vendor call at INFO
QUIET_LOGGERS: Final[tuple[str, ...]] = ("uvicorn.access", "httpx", "httpcore")


def _parse_level(name: str | None) -> int | None:
    if not name:
        return None
    value = logging.getLevelName(name.strip().upper())
    return value if isinstance(value, int) else None


def resolve_level(*, level: str = "", verbose: bool = False, quiet: bool = False) -> int:
    """Return the numeric root level for the given flags and environment."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return _parse_level(level) or _parse_level(os.environ.get("LOG_LEVEL")) or logging.INFO


def configure_logging(
    *,
    level: str = "",
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Configure the root logger; safe to call again (``force=True``).

    Called from CLI commands and from ``create_app``, so it also replaces
    whatever uvicorn installed before the app factory ran.
    """
    logging.basicConfig(
        level=resolve_level(level=level, verbose=verbose, quiet=quiet),
        format=LOG_FORMAT,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for area, logger_name in AREA_LOGGERS.items():
        area_level = _parse_level(os.environ.get(f"LOG_LEVEL_{area}"))
        if area_level is not None:
            logging.getLogger(logger_name).setLevel(area_level)
