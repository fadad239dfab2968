"""
ResourceHub Structured Logging

API handlers and the detector log through structlog; services and storage use
stdlib ``logging``. Both end up in the same handler and renderer so every line
carries the same keys.
"""

import logging
import sys

import structlog

from resourcehub.platform.config import settings

# Chatty at INFO; raised only when LOG_LEVEL is debug
NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def _renderers() -> list:
    if settings.APP_ENV == "production":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=settings.APP_ENV == "development")]


def configure_logging() -> None:
    """Configure structlog and route stdlib records through the same renderer."""

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta] + _renderers(),
    ))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    if log_level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    structlog.contextvars.bind_contextvars(service=settings.APP_NAME, env=settings.APP_ENV)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
