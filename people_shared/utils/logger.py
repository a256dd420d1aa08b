"""
Logging setup using structlog

Every service configures logging once at startup with configure_logging()
and obtains module loggers with get_logger(__name__). Per-message context
(message id, person id) is bound with delivery_context() so that every
line logged while handling one delivery carries it.
"""

import sys
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from ..config.settings import settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    service_name: Optional[str] = None
) -> None:
    """
    Route stdlib logging and structlog to stdout

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (defaults to LOG_LEVEL)
        log_format: 'json' or 'text' (defaults to LOG_FORMAT)
        service_name: bound as `service` on every line
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    as_json = (log_format or settings.log_format) == "json"

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str, **initial_context) -> structlog.stdlib.BoundLogger:
    """
    Module logger, optionally pre-bound with context

    Example:
        logger = get_logger(__name__, component="subscription")
        logger.info("person_enriched", person_id="42")
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


@contextmanager
def delivery_context(**context) -> Iterator[None]:
    """Bind context vars for the duration of one work message"""
    with structlog.contextvars.bound_contextvars(**context):
        yield
