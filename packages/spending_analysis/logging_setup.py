"""Logging configuration shared by the ``spending_analysis`` package.

Library modules obtain loggers through :func:`get_logger` and never attach
handlers themselves. Entrypoints (the Typer CLI, or a host application) call
:func:`configure_logging` once to route package records to a stream.

The level is resolved from the explicit argument, then the
``SPENDING_ANALYSIS_LOG_LEVEL`` environment variable, then ``WARNING``. The
query and categorization engines log their decisions at ``DEBUG``, so a
quiet default keeps per-keystroke filtering silent.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "spending_analysis"
LEVEL_ENV_VAR = "SPENDING_ANALYSIS_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(value: int | str | None) -> int | None:
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else None


def resolve_level(level: int | str | None) -> int:
    """Translate ``level`` (int, digit string or level name) into an int.

    Unknown names fall through to the environment variable and finally to
    ``logging.WARNING``.
    """

    for candidate in (level, os.getenv(LEVEL_ENV_VAR)):
        numeric = _parse_level(candidate)
        if numeric is not None:
            return numeric
    return logging.WARNING


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a single ``StreamHandler`` to the package logger.

    Repeated calls only adjust the level of the existing handler; a second
    handler is never added. Records do not propagate to the root logger.
    """

    global _handler

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    numeric = resolve_level(level)

    if _handler is None:
        for h in list(pkg_logger.handlers):
            if isinstance(h, logging.NullHandler):
                pkg_logger.removeHandler(h)
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
        pkg_logger.addHandler(_handler)
        pkg_logger.propagate = False

    _handler.setLevel(numeric)
    pkg_logger.setLevel(numeric)
    return pkg_logger


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)``, silencing the package until configured."""

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
