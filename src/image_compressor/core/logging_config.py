"""Logging setup: one configured package logger, plain children per stage."""

import logging
import os
import sys
from typing import Optional

PACKAGE_LOGGER = "image-compressor"

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_HANDLER_NAME = "image-compressor-stdout"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a top-level logger with a stdout handler.

    Calling it again only updates the level; the handler is attached once.
    Loggers below ``name`` should come from ``get_logger`` so their records
    reach this handler through propagation.

    Args:
        name: Logger name (defaults to "image-compressor")
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        env_format = os.getenv("LOG_FORMAT", format_type).lower()
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(
            logging.Formatter(
                STRUCTURED_FORMAT if env_format == "structured" else SIMPLE_FORMAT,
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Return a logger inside the package hierarchy.

    Stage loggers such as ``image-compressor.encoder`` carry no handler and
    no level of their own; they follow the package logger.
    """
    return logging.getLogger(name)


def set_log_level(level: str) -> None:
    """Change the level of the whole package, stage loggers included."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(_resolve_level(level))


logger = setup_logger()
