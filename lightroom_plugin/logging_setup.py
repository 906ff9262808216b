"""
Logging configuration for the Lightroom plugin toolkit.
"""

import datetime
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(config, log_prefix: Optional[str] = None) -> None:
    """
    Configure logging based on settings.

    Args:
        config: Application configuration (log_level, log_file, debug_mode)
        log_prefix: Optional prefix for a timestamped log file name
    """
    log_level = getattr(logging, str(config.log_level).upper(), logging.INFO)
    if config.debug_mode:
        log_level = logging.DEBUG

    log_file = config.log_file

    # Create a timestamp-based log file if prefix provided but no specific file
    if not log_file and log_prefix:
        timestamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
        log_file = f"{log_prefix}_{timestamp}.log"

    root = logging.getLogger()
    root.setLevel(log_level)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    # Console output when no file is configured, or in debug mode as well as the file
    if not log_file or config.debug_mode:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(console)

    # Set level for third-party loggers to reduce noise
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured with level: {logging.getLevelName(log_level)}")

    if config.debug_mode:
        logging.debug("Debug mode enabled")
        logging.debug(f"Python version: {sys.version}")
        logging.debug(f"Platform: {sys.platform}")
        logging.debug(f"  Max retries: {config.max_retries}")
        logging.debug(f"  Retry delay: {config.retry_delay}s")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Name for the logger

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def dry_run_prefix(is_dry_run: bool) -> str:
    """Prefix for log messages written while nothing is being changed."""
    return "[DRY RUN] " if is_dry_run else ""
