"""
Logging setup for RealtimeNumberReader.

Every module logs through a child of the "RealtimeNumberReader" logger.
Console output stays short; the rotating log file gets the caller location
and always records debug detail, so per-frame tracker chatter is available
after a replay without rerunning it with --debug.

Log directory: $REALTIME_NUMBER_READER_LOG_DIR, or ~/.realtime_number_reader/logs/.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import LOG_FILENAME, LOG_MAX_BYTES, LOG_BACKUP_COUNT, LOG_DIR_ENV

ROOT_LOGGER_NAME = "RealtimeNumberReader"

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_log_directory(log_dir: Optional[str | Path] = None) -> Path:
    """
    Resolve and create the log directory.

    Args:
        log_dir: Explicit directory. Falls back to the environment override,
                 then to the per-user default.

    Returns:
        Existing log directory path.
    """
    if log_dir is None:
        log_dir = os.environ.get(LOG_DIR_ENV) or Path.home() / ".realtime_number_reader" / "logs"

    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    return handler


def _file_handler(path: Path) -> logging.Handler:
    handler = RotatingFileHandler(
        path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8"
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    return handler


def setup_logging(
    debug: bool = False,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
    log_dir: Optional[str | Path] = None
) -> logging.Logger:
    """
    Configure the application logger. Safe to call repeatedly.

    With a log file the logger itself runs at DEBUG so the file sees
    everything, while the console handler keeps to INFO unless debug is set.

    Args:
        debug: Show debug messages on the console.
        log_to_file: Also write a rotating log file.
        log_filename: Override default log filename.
        log_dir: Override the log directory.

    Returns:
        The configured root application logger.
    """
    console_level = logging.DEBUG if debug else logging.INFO

    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    app_logger.addHandler(_console_handler(console_level))
    app_logger.setLevel(console_level)

    if log_to_file:
        log_path = get_log_directory(log_dir) / (log_filename or LOG_FILENAME)
        app_logger.addHandler(_file_handler(log_path))
        app_logger.setLevel(logging.DEBUG)
        app_logger.debug(f"Log file: {log_path}")

    return app_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child logger of the application logger (the logger itself if no name)."""
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    return app_logger.getChild(name) if name else app_logger
