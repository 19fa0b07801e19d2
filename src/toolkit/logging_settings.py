"""Console logging setup for the toolkit logger."""

from __future__ import annotations

import logging

from .config import ToolkitSettings, get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "toolkit-console"


def resolve_level(value: str) -> int:
    """Map a level name such as ``"debug"`` to its numeric value, INFO if unknown."""

    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: ToolkitSettings | None = None) -> logging.Logger:
    """Attach a console handler to the ``toolkit`` logger.

    Calling it again only updates the level.
    """

    settings = settings or get_settings()
    level = resolve_level(settings.log_level)

    logger = logging.getLogger("toolkit")
    logger.setLevel(level)

    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger


__all__ = ["DATE_FORMAT", "LOG_FORMAT", "configure_logging", "resolve_level"]
