"""
Grid Subset Logging Configuration

This module provides logging configuration for the gridsubset package.
Users can control logging output through standard Python logging facilities.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for gridsubset.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
               Can be string or logging constant
        log_file: Optional path to log file
        format_string: Custom format string for log messages
        date_format: Custom date format string

    Returns:
        logging.Logger: Configured logger instance

    Examples:
        # Debug mode to see resolved index ranges
        >>> from gridsubset import setup_logging
        >>> setup_logging(level=logging.DEBUG)

        # Write logs to file
        >>> setup_logging(log_file='/path/to/gridsubset.log')

        # Disable logging
        >>> import logging
        >>> logging.getLogger('gridsubset').disabled = True
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if format_string is None:
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    if date_format is None:
        date_format = '%Y-%m-%d %H:%M:%S'

    logger = logging.getLogger('gridsubset')
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(format_string, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        logger.info("Logging to file: %s", log_path)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name relative to the package (e.g. 'subsetting.ranges')

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(f'gridsubset.{name}')


# Initialize default logger with NullHandler (no output by default)
_default_logger = logging.getLogger('gridsubset')
if not _default_logger.handlers:
    _default_logger.addHandler(logging.NullHandler())
_default_logger.setLevel(logging.WARNING)


def set_log_level(level: Union[int, str]) -> None:
    """
    Quickly change the logging level for gridsubset.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Examples:
        >>> from gridsubset import set_log_level
        >>> set_log_level('DEBUG')
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger('gridsubset')
    logger.setLevel(level)

    for handler in logger.handlers:
        handler.setLevel(level)
