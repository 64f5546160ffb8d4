"""
Logging Setup - Thesis Defense Platform
thesis_app/core/logging.py

Configures stdlib logging and structlog from LOG_LEVEL / LOG_FORMAT so that
service loggers (logging.getLogger) and scoring loggers (structlog) share
one output stream.
"""

import logging
import sys

import structlog

from thesis_app.config import settings

_configured = False


def configure_logging(level: str = None, fmt: str = None) -> None:
    """Configure logging once per process."""
    global _configured
    if _configured:
        return

    level_name = (level or settings.LOG_LEVEL).upper()
    log_format = fmt or settings.LOG_FORMAT
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )

    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    # structlog events are rendered then handed to the stdlib root handler
    structlog.configure(
        processors=[*shared_processors, structlog.processors.format_exc_info, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def reset_logging() -> None:
    """Drop the structlog configuration so the next configure_logging() applies again."""
    global _configured
    structlog.reset_defaults()
    _configured = False
