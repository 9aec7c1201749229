"""
Logging setup - size-rotated file log plus uncaught-exception capture.
"""

from __future__ import annotations

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fsmatcher.config import settings

LOG_FORMAT = "[%(asctime)s][%(levelname)s][thread-%(thread)d][%(name)s:%(lineno)d]%(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "fsmatcher"

logger = logging.getLogger(ROOT_LOGGER)


def _log_uncaught(exc_type, exc_value, exc_traceback) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))


def _log_uncaught_thread(args: threading.ExceptHookArgs) -> None:
    if args.exc_type is SystemExit:
        return
    thread_name = args.thread.name if args.thread else "unknown"
    logger.critical(
        f"Uncaught exception in thread {thread_name}",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )


def setup_logger(log_path: str | None = None) -> Path:
    """
    Attach a rotating file handler to the `fsmatcher` logger.

    Args:
        log_path: Log directory. None uses the configured or platform default.

    Returns:
        Path of the active log file.

    Raises:
        OSError: the directory or file could not be created.
    """
    log_dir = Path(log_path or settings.resolved_log_dir())
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / settings.log_file_name

    handler = RotatingFileHandler(
        log_file,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler.setLevel(settings.log_level.upper())

    for existing in list(logger.handlers):
        if isinstance(existing, RotatingFileHandler):
            logger.removeHandler(existing)
            existing.close()

    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())

    sys.excepthook = _log_uncaught
    threading.excepthook = _log_uncaught_thread
    return log_file
