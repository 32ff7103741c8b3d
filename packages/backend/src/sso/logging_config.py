"""structlog setup per deployment environment.

Learn: local runs get a colourised console renderer at DEBUG so a human
can read it; dev and prod emit one JSON object per line for log shipping,
dev at DEBUG and prod at INFO. Request-scoped values (request_id) come in
through structlog's contextvars, merged first in the processor chain.
"""

import logging
import sys

import structlog

ENV_LOCAL = "local"
ENV_DEV = "dev"
ENV_PROD = "prod"


def configure_logging(environment: str = ENV_LOCAL) -> None:
    """Configure structlog (and stdlib logging underneath) for an environment."""
    level = logging.INFO if environment == ENV_PROD else logging.DEBUG

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if environment == ENV_LOCAL:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
