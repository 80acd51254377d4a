"""
Structured logging configuration using structlog and rich.
"""
import logging
import sys
from typing import Any, Dict, Optional

import structlog
from rich.console import Console
from rich.logging import RichHandler

from .config import settings


def configure_logging() -> None:
    """Configure structured logging for the library."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    # azure-core logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(max(level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.is_development or settings.log_format.lower() == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.is_development))

        if settings.is_development:
            rich_handler = RichHandler(
                console=Console(stderr=True),
                show_time=True,
                show_path=True,
                markup=True,
                rich_tracebacks=True,
            )

            root_logger = logging.getLogger()
            root_logger.handlers.clear()
            root_logger.addHandler(rich_handler)

    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Log error with structured data."""
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }


# Initialize logging on module import
configure_logging()

logger = get_logger(__name__)
