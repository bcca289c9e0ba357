"""Logging setup for the CLI.

Diagnostics go through the standard library logging tree and are rendered
on stderr by Rich; user-facing messages keep using ``out``.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "MMUI_LOG_LEVEL"


def _resolve_level(value: str | None, verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    if not value:
        return logging.WARNING
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(*, verbose: bool = False) -> None:
    """Route the ``mmui`` logger to a Rich handler on stderr."""
    level = _resolve_level(os.getenv(LOG_LEVEL_ENV), verbose)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    logger = logging.getLogger("mmui")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
