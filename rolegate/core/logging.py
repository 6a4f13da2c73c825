"""
Structured logging configuration using structlog.

Usage:
    from rolegate.core.logging import setup_logging

    setup_logging(settings)

    logger = structlog.get_logger()
    logger.info("rbac_denied", rule="owner_only", user_id=42)
"""

import logging
import sys

import structlog

from rolegate.core.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog from settings."""
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.log_format == "json":
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.is_development))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
