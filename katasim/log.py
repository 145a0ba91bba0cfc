# katasim/log.py
"""Logging helpers for katasim.

Every module asks for its logger with ``get_logger(__name__)``; all loggers
live under the ``katasim`` namespace and share one stderr handler format.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_DEFAULT_LEVEL = logging.WARNING

_loggers: dict[str, logging.Logger] = {}


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached ``katasim.*`` logger for ``name``.

    Example:
        >>> from katasim.log import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("allocated %d qubits", 3)
    """
    if name is None:
        name = "katasim"
    logger_name = name if name == "katasim" or name.startswith("katasim.") else f"katasim.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every katasim logger, existing and future."""
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Replace the handlers of all katasim loggers.

    Args:
        level: logging level or its name ('DEBUG', 'INFO', ...).
        format_string: custom record format; defaults to ``[LEVEL] name: msg``.
        stream: output stream, stderr by default.
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    if stream is None:
        stream = sys.stderr
    formatter = logging.Formatter(format_string or _FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level
