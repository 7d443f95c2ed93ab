"""Centralized logging configuration for CLI and web entry points.

One call sets the root level for the whole process; each subpackage can
then be turned up or down on its own through ``LOG_LEVEL_{SUBPACKAGE}``,
e.g. ``LOG_LEVEL_SCANNER=DEBUG`` to watch per-symbol stage events.
"""

from __future__ import annotations

import logging
import os
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
PACKAGE: Final[str] = "Swing_Scout"

_SUBPACKAGES: Final[tuple[str, ...]] = (
    "scanner",
    "services",
    "web",
    "data",
    "analysis",
    "indicators",
)

# Chatty third-party loggers: one line per HTTP request or SQL statement
_NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "aiosqlite", "uvicorn.access")


def _resolve_level(name: str | None) -> int | None:
    """Map a level name such as ``"debug"`` to its numeric value, or None if unknown."""
    if not name:
        return None
    resolved = logging.getLevelName(name.strip().upper())
    return resolved if isinstance(resolved, int) else None


def configure_logging(
    *,
    level: str = "",
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """Configure the root logger and per-subpackage overrides.

    Priority: verbose > quiet > level param > LOG_LEVEL env > INFO default.
    An unknown level name falls through to the next source. ``force=True``
    replaces any handler uvicorn installed before the app started.

    Returns:
        The effective root level.
    """
    if verbose:
        effective = logging.DEBUG
    elif quiet:
        effective = logging.WARNING
    else:
        effective = (
            _resolve_level(level) or _resolve_level(os.environ.get("LOG_LEVEL")) or logging.INFO
        )

    logging.basicConfig(level=effective, format=LOG_FORMAT, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(effective, logging.WARNING))

    for subpackage in _SUBPACKAGES:
        override = _resolve_level(os.environ.get(f"LOG_LEVEL_{subpackage.upper()}"))
        if override is not None:
            logging.getLogger(f"{PACKAGE}.{subpackage}").setLevel(override)

    return effective
