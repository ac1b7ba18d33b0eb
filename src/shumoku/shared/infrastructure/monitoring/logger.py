"""
Centralized logging configuration for Shumoku.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from functools import lru_cache

from ...config.settings import get_settings


@lru_cache()
def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    include_timestamp: bool = True
) -> None:
    """
    Setup centralized logging configuration.

    Only the ``shumoku`` logger hierarchy is configured so embedding
    applications keep control of the root logger.

    Args:
        log_level: Logging level (defaults to the configured level)
        log_file: Optional log file path (defaults to the configured file)
        include_timestamp: Whether to include timestamps
    """
    settings = get_settings()

    level_str = (log_level or settings.logging_config['level']).upper()
    level = getattr(logging, level_str, logging.INFO)
    log_file = log_file or settings.logging_config['file']

    if include_timestamp:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            '%(name)s - %(levelname)s - %(message)s'
        )

    package_logger = logging.getLogger('shumoku')
    package_logger.setLevel(level)
    package_logger.propagate = False

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    # Diagnostics go to stderr; stdout carries rendered documents
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)


@lru_cache()
def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    setup_logging()

    return logging.getLogger(name)
