"""
Logging for the cashflow packages.

Modules log through ``get_logger("cashflow.<module>")`` and never attach
handlers; a host process calls ``configure_logging()`` once.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Optional, Union

ROOT_LOGGER = "cashflow"
LEVEL_ENV_VAR = "CASHFLOW_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_CONFIGURED = False


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Explicit level, else $CASHFLOW_LOG_LEVEL, else INFO. Unknown names raise ValueError."""
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(
    level: Union[int, str, None] = None,
    *,
    fmt: str = DEFAULT_FORMAT,
    stream: Optional[IO[str]] = None,
) -> None:
    """Send ``cashflow.*`` records to ``stream`` (stderr by default). Later calls are no-ops."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.NullHandler)]
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)
    root.setLevel(resolve_level(level))
    root.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Logger under the package root; silent until ``configure_logging`` runs."""
    root = logging.getLogger(ROOT_LOGGER)
    if not _CONFIGURED and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
