from __future__ import annotations

import logging

from .paths import PACKAGE_NAME

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_HANDLER_NAME = f"{PACKAGE_NAME}-console"


def setup_logging(level: str | int = "WARNING") -> logging.Logger:
    """Attach a console handler to the package logger.

    Calling this more than once only updates the level; the handler is not
    duplicated.

    Args:
        level: Logging level name or number.

    Returns:
        The configured package logger.

    Raises:
        ValueError: If ``level`` is not a known logging level.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    logger = logging.getLogger(PACKAGE_NAME)
    logger.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
