"""Logging configuration for StockPulse."""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from stockpulse.utils.log_context import get_job_name, get_session_state, get_ticker

LOG_FORMAT = (
    "%(asctime)s [%(session_state)s] [%(job_name)s] [%(ticker)s]"
    " [%(levelname)s] [%(name)s] %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Record attribute -> context getter
_CONTEXT_FIELDS = {
    "session_state": get_session_state,
    "job_name": get_job_name,
    "ticker": get_ticker,
}

# Third-party loggers capped at WARNING
_QUIET_LOGGERS = ("apscheduler", "asyncio")


class StockPulseFormatter(logging.Formatter):
    """Stamps each record with the session state, job and ticker of its task."""

    def format(self, record: logging.LogRecord) -> str:
        for attr, getter in _CONTEXT_FIELDS.items():
            setattr(record, attr, getter() or "-")
        return super().format(record)


def _rotating_file_handler(log_file: str, retention_days: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return TimedRotatingFileHandler(path, when="midnight", backupCount=retention_days, utc=True)


def configure_logging(
    level: str = "INFO",
    log_file: str | None = "stockpulse.log",
    retention_days: int = 7,
) -> None:
    """Set up the ``stockpulse`` logger tree.

    The console only receives errors; everything at *level* and above goes to
    a log file rotated at midnight UTC. Calling this again replaces the
    handlers from the previous call.

    Args:
        level: Log level name, case-insensitive.
        log_file: Rotating log file path, or None for console-only logging.
        retention_days: Rotated files kept before the oldest is deleted.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    formatter = StockPulseFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    handlers[0].setLevel(logging.ERROR)
    if log_file:
        handlers.append(_rotating_file_handler(log_file, retention_days))

    app_logger = logging.getLogger("stockpulse")
    for old in app_logger.handlers:
        old.close()
    app_logger.handlers.clear()
    app_logger.setLevel(numeric_level)
    for handler in handlers:
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
