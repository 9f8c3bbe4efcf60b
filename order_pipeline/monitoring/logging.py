"""
Structured logging for the order pipeline.

Pipeline events are structlog key/value events (``order_queued_offline``,
``audit_write_failed`` ...) carrying ``order_id``. They are rendered as one
JSON object per line on stderr, leaving stdout to the CLI. With ``debug``
enabled the console renderer is used instead.
"""
import logging
import sys
from typing import Optional

import structlog
from pythonjsonlogger import jsonlogger
from structlog.types import Processor

from order_pipeline.config import Settings, get_settings


def _renderer(settings: Settings) -> Processor:
    if settings.debug:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Route structlog and stdlib logging through one stderr handler."""
    settings = settings or get_settings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)

    structlog.get_logger(__name__).debug(
        "logging_configured", log_level=settings.log_level, service=settings.app_name
    )
