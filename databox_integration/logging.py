import logging
import sys
from typing import Optional

import structlog


def init_logging(log_level: str = "INFO", app_name: Optional[str] = None) -> structlog.BoundLogger:
    """Configure structlog on top of stdlib logging.

    Events render as JSON lines, or through the console renderer at DEBUG.
    Context bound with ``structlog.contextvars`` (the per-request id) is merged
    into every event.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    # requests/urllib3 log full URLs, which carry upstream access keys
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))

    renderer = structlog.dev.ConsoleRenderer() if level == logging.DEBUG else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger()
    return logger.bind(app=app_name) if app_name else logger
