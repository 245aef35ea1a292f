"""
Logging configuration and utilities.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def setup_root_logger(log_file: Optional[Path] = None,
                      level: str = "INFO",
                      format_string: Optional[str] = None,
                      max_bytes: int = 10 * 1024 * 1024,
                      backup_count: int = 5):
    """
    Set up the root logger for the application.

    Console output uses a short format so progress lines stay readable; the
    log file gets the detailed format.

    Args:
        log_file: Optional log file path
        level: Logging level
        format_string: Console log format
        max_bytes: Rotate the log file at this size
        backup_count: Number of rotated files to keep
    """
    root_logger = logging.getLogger()

    # Clear any existing handlers
    root_logger.handlers.clear()

    root_logger.setLevel(getattr(logging, level.upper()))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        ))
        root_logger.addHandler(file_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
