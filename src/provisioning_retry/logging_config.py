"""Structured logging for retry decisions, using structlog.

Pipelines and retry engines log through loggers bound to their pipeline
name, so every line says which backend family it is about. Durations
(delay hints, Retry-After) are rendered as float seconds.

JSON output for production, pretty console output for development.

Usage, once at process start:
    from provisioning_retry.logging_config import configure_from_settings
    configure_from_settings()
"""

import logging
import sys
from datetime import timedelta
from typing import Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from provisioning_retry.config import Settings
from provisioning_retry.config import settings as default_settings

APP_NAME = "provisioning-retry"

# Third-party loggers that are chatty at INFO while a retry loop runs
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the application name."""
    event_dict["app"] = APP_NAME
    return event_dict


def durations_to_seconds(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Render timedelta values (delay hints, Retry-After) as float seconds."""
    for key, value in event_dict.items():
        if isinstance(value, timedelta):
            event_dict[key] = value.total_seconds()
    return event_dict


def configure_logging(log_level: str = "INFO", environment: str = "development") -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to INFO
        environment: Environment name; "production" selects JSON output

    Exceptions logged with ``logger.exception`` (predicate or adapter
    failures) are rendered as text tracebacks in JSON and pretty-printed
    by the console renderer.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        durations_to_seconds,
    ]

    renderer: Processor
    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )
    handler.setLevel(level)

    root_logger = logging.getLogger()
    # Replace, so reconfiguring never duplicates output
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(level),
        environment=environment,
        renderer="json" if is_production else "console",
    )


def configure_from_settings(app_settings: Optional[Settings] = None) -> None:
    """Configure logging from LOG_LEVEL and ENVIRONMENT."""
    if app_settings is None:
        app_settings = default_settings
    configure_logging(app_settings.LOG_LEVEL, app_settings.ENVIRONMENT)
