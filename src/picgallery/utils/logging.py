"""Logging helpers shared by the server and the engine."""

from __future__ import annotations

import logging
import sys

_ROOT_NAME = "picgallery"
_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"

_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the project logger or one of its children."""

    if not name or name == _ROOT_NAME:
        return logging.getLogger(_ROOT_NAME)
    if name.startswith(f"{_ROOT_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


def parse_level(value: str | int) -> int:
    """Translate a level name such as ``"debug"`` into a :mod:`logging` level."""

    if isinstance(value, int):
        return value
    try:
        return _LEVELS[value.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {value!r}") from None


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach exactly one stderr handler to the project logger.

    Calling the function again only updates the level and formatter so late
    CLI parsing can still take effect.
    """

    logger = get_logger()
    logger.setLevel(parse_level(level))

    handler: logging.StreamHandler | None = None
    for existing in logger.handlers:
        if isinstance(existing, logging.StreamHandler) and getattr(existing, "stream", None) is sys.stderr:
            handler = existing
            break
    if handler is None:
        handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    return logger
