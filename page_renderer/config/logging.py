"""
Logging Configuration
====================

Structured logging configuration with environment-specific settings.
Uses structlog for structured logging with JSON output in production.
Request-scoped values (the request id, the render target) are kept in
structlog context variables and merged into every event.
"""

import logging
import logging.config
import sys
from typing import Any, Dict, Optional, TYPE_CHECKING

import structlog
from structlog.types import Processor

from .settings import get_settings

if TYPE_CHECKING:
    from .settings import Settings

# Third-party loggers that are noisy below these levels
LIBRARY_LOG_LEVELS: Dict[str, str] = {
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
    "fastapi": "INFO",
    "playwright": "WARNING",
    "asyncio": "WARNING",
    "PIL": "WARNING",
}


def setup_logging(settings: Optional["Settings"] = None) -> None:
    """Configure structlog and the standard library logging tree."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(get_logging_config(settings))


def _renderer(settings: "Settings") -> Processor:
    if settings.environment == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def get_logging_config(settings: "Settings") -> Dict[str, Any]:
    """
    dictConfig for the standard library loggers.

    structlog events arrive already rendered, so the plain formatter only
    passes the message through; records from libraries go through the JSON
    formatter in production.
    """
    formatter = "json" if settings.environment == "production" else "plain"

    loggers: Dict[str, Any] = {
        name: {"level": level, "handlers": ["console"], "propagate": False}
        for name, level in LIBRARY_LOG_LEVELS.items()
    }
    loggers[""] = {"level": settings.log_level, "handlers": ["console"], "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(message)s"},
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "stream": sys.stdout,
            },
        },
        "loggers": loggers,
    }


def bind_request_context(**values: Any) -> None:
    """Attach values to every log event emitted while handling this request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
