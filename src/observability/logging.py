"""
Structured logging configuration using structlog.

API modules log through structlog with bound fields (request_id, user_id);
library modules use ``logging.getLogger(__name__)``. Both end up on stdout
through the same processor chain: JSON in production, colored console
output otherwise.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from src.config.settings import get_settings

# Upstream HTTP and connection pool chatter stays at WARNING unless DEBUG
# logging is requested explicitly.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "asyncpg", "uvicorn.access")


def build_processors(json_output: bool, with_trace_context: bool) -> list[Processor]:
    """Return the structlog processor chain for the given output mode."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if with_trace_context:
        from src.observability.tracing import add_trace_context

        processors.append(add_trace_context)

    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def setup_logging(level: str | None = None) -> None:
    """
    Configure structured logging for the process.

    Args:
        level: Overrides ``LOG_LEVEL`` from settings when given.

    Usage:
        setup_logging()
        logger = structlog.get_logger(__name__)
        logger.info("Feed rebuilt", user_id="abc", items=12)
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    structlog.configure(
        processors=build_processors(
            json_output=settings.is_production,
            with_trace_context=settings.tracing_enabled,
        ),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name),
    )

    if level_name != "DEBUG":
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
