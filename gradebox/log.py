"""Operator logging for the GradeBox engine.

Logs go to stderr. Stdout is reserved for the `Comment :=>>` and
`Grade :=>>` lines read by the course platform.
"""

import logging
import sys
from typing import Optional

from . import config

_root: Optional[logging.Logger] = None


def setup_logging(level: Optional[int] = None) -> logging.Logger:
    """Configure and return the `gradebox` root logger.

    Args:
        level: Explicit log level. Defaults to the level derived from
            the GRADEBOX_DEBUG environment variable.

    Returns:
        logging.Logger: The configured package logger.
    """
    global _root
    logger = logging.getLogger("gradebox")
    logger.setLevel(config.LOG_LEVEL if level is None else level)

    # Prevent adding multiple handlers if called again
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
        logger.addHandler(handler)

    logger.propagate = False
    _root = logger
    logger.debug("Logger initialized in DEBUG mode.")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the `gradebox.<name>` logger, setting up the root if necessary."""
    if _root is None:
        setup_logging()
    return logging.getLogger(f"gradebox.{name}")
