"""Centralized logging configuration for the images crawler."""

import os
import sys
import logging
from typing import Optional

PACKAGE_LOGGER = "images_crawler"

_STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
_SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure the handler and level of a logger, normally the package logger.

    Called once by the entry point. Every module logger obtained through
    get_logger() is a child of the package logger and inherits its level and
    handler, so a later call (e.g. for --debug) changes all of them at once.

    Args:
        name: Logger name (defaults to the package logger)
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)

    requested = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, requested.upper(), logging.INFO))

    # One stdout handler per configured logger
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        env_format = os.getenv("LOG_FORMAT", format_type).lower()
        handler.setFormatter(
            logging.Formatter(_STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            if env_format == "structured"
            else logging.Formatter(_SIMPLE_FORMAT)
        )
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Look up a logger below the package logger without reconfiguring it.

    ``get_logger(__name__)`` from inside the package returns the module's own
    logger; a short name such as ``"crawler"`` becomes ``images_crawler.crawler``.
    """
    if not name or name == PACKAGE_LOGGER:
        return logging.getLogger(PACKAGE_LOGGER)
    if name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


# Default handler so library use logs sensibly before main() configures it
logger = setup_logger()
