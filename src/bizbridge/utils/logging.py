"""Logging helpers shared by every bizbridge module."""

import logging
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name`` (use ``__name__``)."""
    return logging.getLogger(name)


def configure_logging(level: int | str = logging.INFO, fmt: Optional[str] = None) -> logging.Logger:
    """
    Install a single stream handler on the ``bizbridge`` logger.

    Calling this more than once replaces the handler instead of stacking them.

    Args:
        level: Logging level (int or name such as "DEBUG")
        fmt: Optional format string, defaults to DEFAULT_FORMAT

    Returns:
        The configured package logger
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    root = logging.getLogger("bizbridge")
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
    return root
