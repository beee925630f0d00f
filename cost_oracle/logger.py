"""
Logging for the cost oracle.

Handlers live on the package logger ("cost_oracle"). Component loggers are its
children ("cost_oracle.cost_estimator", ...) and propagate to it, so one
configuration call controls console and file output for the whole oracle.
"""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

PACKAGE_LOGGER = "cost_oracle"

DETAILED_FORMATTER = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

CONSOLE_FORMATTER = logging.Formatter(
    '%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)

    # Console handler added once per process
    if not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    ):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(CONSOLE_FORMATTER)
        logger.addHandler(console_handler)
        logger.setLevel(logging.INFO)

    return logger


def _attach_file_handler(logger: logging.Logger, log_file: str, max_bytes: int, backup_count: int) -> None:
    target = os.path.abspath(log_file)
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == target:
            return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(DETAILED_FORMATTER)
    logger.addHandler(file_handler)


def setup_logger(
    name: str = PACKAGE_LOGGER,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5
) -> logging.Logger:
    """
    Get a component logger, configuring the package logger on the way.

    Args:
        name: Component name; PACKAGE_LOGGER returns the package logger itself
        log_level: Package log level (DEBUG, INFO, ...); None leaves it unchanged
        log_file: Rotating log file for the package (None = console only)
        max_bytes: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured logger instance
    """
    package = _package_logger()

    if log_level:
        package.setLevel(getattr(logging, log_level.upper()))
    if log_file:
        _attach_file_handler(package, log_file, max_bytes, backup_count)

    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return package.getChild(name)
