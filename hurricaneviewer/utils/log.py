"""hurricaneviewer.utils.log – colourised logger helper"""

from __future__ import annotations

import logging
import sys
from types import ModuleType
from typing import Optional, cast

from hurricaneviewer.utils import config

try:
    import colorlog
except ImportError:  # graceful degradation
    colorlog_module: Optional[ModuleType] = None
else:
    colorlog_module = colorlog

# Map level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_level_from_config() -> int:
    """Gets the logging level from config, defaulting to INFO."""
    try:
        level_name = config.get_logging_level().upper()
    except config.ConfigurationError:
        # A broken config file is reported by the entry point, not at import time
        return logging.INFO
    return LOG_LEVEL_MAP.get(level_name, logging.INFO)


_LEVEL = _get_level_from_config()

_handler: Optional[logging.Handler] = None


def _build_handler() -> logging.Handler:
    handler: logging.Handler
    if colorlog_module:
        handler = cast(logging.Handler, colorlog_module.StreamHandler())
        handler.setFormatter(
            colorlog_module.ColoredFormatter(
                fmt="%(log_color)s[%(levelname).1s] %(name)s: %(message)s",
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "white",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bold",
                },
            )
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("[%(levelname).1s] %(name)s: %(message)s"))
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Gets a logger instance sharing the module-wide handler."""
    global _handler

    logger = logging.getLogger(name)
    logger.setLevel(_LEVEL)

    if _handler is None:
        _handler = _build_handler()
        _handler.setLevel(_LEVEL)

    handler_types = [type(h) for h in logger.handlers]
    if type(_handler) not in handler_types:
        logger.addHandler(_handler)
    # Avoid double output when the root logger is configured by a host application
    logger.propagate = False

    return logger


def set_level(debug_mode: bool, level_name: str | None = None) -> None:
    """Set the level of every hurricaneviewer logger.

    Debug mode wins; otherwise ``level_name`` (one of :data:`LOG_LEVEL_MAP`)
    is used, and INFO when it is not given.
    """
    global _LEVEL
    if debug_mode:
        _LEVEL = logging.DEBUG
    else:
        _LEVEL = LOG_LEVEL_MAP.get((level_name or "INFO").upper(), logging.INFO)

    if _handler:
        _handler.setLevel(_LEVEL)

    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("hurricaneviewer") and isinstance(logger, logging.Logger):
            logger.setLevel(_LEVEL)
