"""
Application logging.

Every module logs through a child of the ``timesifter`` logger obtained with
``get_logger``. ``configure_logging`` is called once at startup with the
``logging`` section of config.yml and attaches a size-rotated log file in the
logs directory plus a console stream. Timestamps are always UTC.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.config import LoggingConfig

LOG_FILE_NAME = "timesifter.log"
ROOT_LOGGER_NAME = "timesifter"
LOG_FORMAT = "%(asctime)sZ %(levelname)s %(name)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class UtcFormatter(logging.Formatter):
    """Renders record times in UTC regardless of the examiner's time zone."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:  # noqa: N802
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.strftime(datefmt or LOG_DATE_FORMAT)


def resolve_level(name: str) -> int:
    """Map a config level name such as ``"debug"`` to its numeric value; unknown names give INFO."""
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(log_dir: Path, settings: Optional[LoggingConfig] = None) -> Logger:
    """
    Route the application logger to ``log_dir/timesifter.log`` and the console.

    Args:
        log_dir: Directory for the log file, created if missing
        settings: Level and rotation from config.yml (defaults when None)

    Returns:
        The application root logger
    """
    settings = settings or LoggingConfig()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(resolve_level(settings.level))
    # reconfiguring must not leave the previous log file open
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = UtcFormatter(fmt=LOG_FORMAT)
    handlers = [
        RotatingFileHandler(
            log_path,
            maxBytes=settings.max_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        ),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    root_logger.debug("Logging to %s (level %s, rotate at %d MB, keep %d)",
                      log_path, settings.level, settings.max_mb, settings.backup_count)
    return root_logger


def get_logger(name: Optional[str] = None) -> Logger:
    """Return ``timesifter.<name>``, or the application root logger when no name is given."""
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    return root_logger.getChild(name) if name else root_logger
