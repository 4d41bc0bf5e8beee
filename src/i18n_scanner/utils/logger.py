"""Structured logging for the scanner.

structlog rides on stdlib logging; everything goes through the `i18n_scanner`
logger so host applications keep control of the root logger.
"""
import logging
import sys
from typing import Optional

import structlog

PACKAGE_LOGGER = "i18n_scanner"

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure_logging(level: str = "WARNING", json_format: bool = False) -> None:
    """Configure structlog and the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: Render JSON lines instead of console output
    """
    log_level = _LEVEL_MAP.get(level.upper(), logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Don't cache - allows reconfiguration and respects level changes
        cache_logger_on_first_use=False,
    )

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a bound logger over the stdlib logger `name`.

    Nothing is configured here: until configure_logging() runs, records
    follow the host application's logging setup.
    """
    return structlog.wrap_logger(logging.getLogger(name or PACKAGE_LOGGER),
                                 wrapper_class=structlog.stdlib.BoundLogger)
