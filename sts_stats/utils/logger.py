"""Logging configuration using loguru."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

# Library code stays quiet until an entry point calls setup_logger()
logger.remove()

_logger = logger


def setup_logger(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = False,
) -> None:
    """
    Configure the logger with console and file outputs.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        console: Enable console output
        file: Enable file output
    """
    global _logger

    _logger.remove()

    console_format = (
        "<green>{time:HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
        "<level>{message}</level>"
    )

    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
        "{level: <8} | "
        "{name}:{function}:{line} | "
        "{message}"
    )

    if console:
        _logger.add(
            sys.stderr,
            format=console_format,
            level=level,
            colorize=True,
        )

    if file and log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        _logger.add(
            log_path / "sts_stats_{time:YYYY-MM-DD}.log",
            format=file_format,
            level=level,
            rotation="00:00",
            retention="7 days",
        )


def get_logger():
    """Get the configured logger instance."""
    return _logger
