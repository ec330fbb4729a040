"""Logging configuration for Encore.

The API, the Celery worker and the CLI each call setup_logging() once at
startup. Calling it again replaces the handlers instead of stacking them.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from encore.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty below WARNING; the import pipeline logs per row on its own
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "celery", "sqlalchemy.engine")


def _level(name: Optional[str]) -> int:
    return getattr(logging, (name or settings.log_level).upper(), logging.INFO)


def setup_logging(level: Optional[str] = None, log_path: Optional[str] = None) -> None:
    """Configure the root logger for the current process.

    ``level`` and ``log_path`` override LOG_LEVEL and LOG_PATH.
    """
    log_level = _level(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    log_path = log_path if log_path is not None else settings.log_path
    if log_path:
        log_file = Path(log_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # SQL echo only when explicitly debugging
    if log_level <= logging.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
