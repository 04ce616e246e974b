"""Mini README: Application-wide logging helpers for the back office.

Structure:
    * get_logger - module loggers sharing one root handler.
    * configure_root_logger - set the global level from a number or a name.

Usage:
    Modules keep a module level ``LOGGER = get_logger(__name__)``. Importing
    a module installs the root handler once; entry points then call
    ``configure_root_logger(settings.log_level)`` to pick the verbosity, which
    may happen after every module has already been imported.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER: Optional[logging.Handler] = None


def _install_handler() -> logging.Logger:
    global _HANDLER
    root_logger = logging.getLogger()
    if _HANDLER is None:
        _HANDLER = logging.StreamHandler()
        _HANDLER.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(_HANDLER)
        root_logger.setLevel(logging.INFO)
    return root_logger


def resolve_level(level: Union[int, str]) -> int:
    """Accept ``logging`` constants or names such as ``"debug"``."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_root_logger(level: Union[int, str] = logging.INFO) -> None:
    """Install the shared handler if needed and apply ``level`` to the root logger."""

    _install_handler().setLevel(resolve_level(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger; the level is left to the entry point."""

    _install_handler()
    return logging.getLogger(name)
