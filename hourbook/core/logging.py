"""
Logging configuration for Hourbook.

One stream handler per named logger, shared line format, level taken
from config.yaml unless the caller passes one.
"""

import logging
import sys
from typing import Dict, Optional

_loggers: Dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configured_level() -> int:
    from hourbook.core.config import get_config_value

    try:
        name = str(get_config_value("logging", "level", default="INFO")).upper()
    except FileNotFoundError:
        return logging.INFO
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for a module.

    Args:
        name: Logger name (e.g., 'hourbook.projects.budgets')
        level: Logging level (default: logging.level from config.yaml)

    Returns:
        Configured logger
    """
    if name in _loggers:
        return _loggers[name]

    if level is None:
        level = _configured_level()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        # stderr keeps CLI json output on stdout clean
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    _loggers[name] = logger
    return logger
