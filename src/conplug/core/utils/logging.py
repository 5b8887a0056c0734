import sys
import logging
from typing import Optional

import structlog

from conplug.core.settings import Settings


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def configure_logging(settings_obj: Optional[Settings] = None):
    """Configure structured logging from CONPLUG_LOG_LEVEL / CONPLUG_LOG_JSON."""
    settings_obj = settings_obj or Settings()
    level = getattr(logging, settings_obj.LOG_LEVEL.upper(), logging.WARNING)

    # Configure standard logging
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if settings_obj.LOG_JSON:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
