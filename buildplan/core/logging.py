"""Structured logging via structlog.

Library modules log through ``logging.getLogger(__name__)``; applications
embedding buildplan call `configure_logging()` once at startup so both the
stdlib loggers and the structlog event sink share one output format.

Renderer selection:
  json_logs=False: `ConsoleRenderer` for local development.
  json_logs=True: `JSONRenderer` for machine-parseable logs.
"""

import logging
import sys
from typing import Optional

import structlog

from buildplan.core.config import get_settings


def configure_logging(debug: Optional[bool] = None, json_logs: Optional[bool] = None) -> None:
    """Configure structlog and the stdlib bridge.

    Arguments left as None come from `Settings.debug` and
    `Settings.json_logs`. Calling multiple times is safe; the last call wins.
    """
    settings = get_settings()
    debug = settings.debug if debug is None else debug
    json_logs = settings.json_logs if json_logs is None else json_logs
    level = logging.DEBUG if debug else logging.INFO

    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )
