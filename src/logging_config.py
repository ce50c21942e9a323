"""Logging setup, applied on import.

Application modules log through ``logging.getLogger(__name__)``; the
HTTP layer logs key/value events through structlog, which is routed
into the same stdlib handler so one level setting governs both.
"""

import logging
import sys
from typing import Literal

import structlog

from src.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

APP_LOGGERS = ("src", "specflow")

# Third-party loggers held at WARNING unless listed in QUIET_LEVELS
QUIET_LOGGERS = (
    "alembic",
    "asyncio",
    "httpcore",
    "httpx",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "langchain",
    "langchain_core",
    "openai",
    "google_genai",
    "urllib3",
)
QUIET_LEVELS = {"sqlalchemy.pool": logging.ERROR}

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"


def _quiet_third_party() -> None:
    for name in QUIET_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(QUIET_LEVELS.get(name, logging.WARNING))
        logger.handlers.clear()


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_logging(level: LogLevel | None = None) -> None:
    """Install a single stderr handler at ``level`` (default: LOG_LEVEL).

    Safe to call again; the previous root handlers are replaced.
    """
    numeric = getattr(logging, level or get_settings().log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    # Handlers filter; the root passes everything through
    root.setLevel(logging.DEBUG)

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(numeric)

    _quiet_third_party()
    _configure_structlog()


configure_logging()
