"""Logging for teamflow.

Every module logs through ``get_logger(__name__)``, so all records flow into
the single ``teamflow`` logger. That logger owns the only handler (stdout) and
the level; child loggers stay at NOTSET and inherit both.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "teamflow"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the handler on the ``teamflow`` logger, once.

    Later calls do nothing until :func:`reset_logging`.

    Args:
        level: Initial level of the ``teamflow`` logger.
        format_string: Record format; defaults to ``DEFAULT_FORMAT``.
        handler: Where records go; defaults to a stdout StreamHandler.
    """
    global _configured
    if _configured:
        return

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    # caplog listens on the root logger
    package_logger.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` that defers level and output to ``teamflow``."""
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Apply ``level`` to the ``teamflow`` logger and its handlers.

    The CLI calls this for ``--verbose`` (DEBUG), ``--quiet`` (WARNING) and the
    INFO default.
    """
    setup_root_logger()
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)


def reset_logging() -> None:
    """Drop the handler and level so the next setup starts clean."""
    global _configured
    _configured = False
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
