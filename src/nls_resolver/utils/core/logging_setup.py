"""
Optional log file for the resolver's own records.

The package never touches the root logger. Applications that want the
resolver's diagnostics in a separate file attach one to the package logger;
everything else reaches whatever handlers the application configured.
"""

import logging
import logging.handlers
import os
from pathlib import Path

PACKAGE_LOGGER_NAME = "nls_resolver"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 2


def attach_log_file(log_file: Path, level: int = logging.INFO) -> logging.Handler:
    """
    Route the package's log records to a size-rotated file.

    Attaching the same file again only updates its level.

    Args:
        log_file: Destination file; its folder is created if missing
        level: Minimum level written to the file

    Returns:
        The handler writing ``log_file``

    Raises:
        OSError: If the file cannot be opened
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    target = os.path.abspath(log_file)

    for existing in package_logger.handlers:
        if isinstance(existing, logging.handlers.RotatingFileHandler) and existing.baseFilename == target:
            existing.setLevel(level)
            _lower_logger_level(package_logger, level)
            return existing

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    _lower_logger_level(package_logger, level)
    return handler


def detach_log_file(handler: logging.Handler) -> None:
    """Remove and close a handler returned by ``attach_log_file``."""
    logging.getLogger(PACKAGE_LOGGER_NAME).removeHandler(handler)
    handler.close()


def _lower_logger_level(package_logger: logging.Logger, level: int) -> None:
    # NOTSET defers to the root logger, which may filter below WARNING
    if package_logger.level == logging.NOTSET or package_logger.level > level:
        package_logger.setLevel(level)
