"""
Structured Logging

Every module logs through structlog with snake_case event names and
key/value context, e.g.:

    logger.info("snapshot_added", snapshot_id=str(snapshot.id))

configure_logging() is called once by the component factory. It is
safe to call again (e.g. from tests); later calls reconfigure.
"""

import logging
import sys
from typing import Optional

import structlog

from stash.config import get_settings


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        level: Minimum log level. Defaults to the configured one.
        json_output: JSON renderer if True, console renderer otherwise.
                     Defaults to the configured one.
    """
    app_settings = get_settings().app
    level = (level or app_settings.log_level).upper()
    if json_output is None:
        json_output = app_settings.log_json and not app_settings.debug_mode

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
