"""
Logging Configuration
Sets up the global logger for the application.
"""
import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "TILETRACE_LOG_LEVEL"


def level_from_env(default: int = logging.INFO) -> int:
    """Resolve the log level from the TILETRACE_LOG_LEVEL environment variable."""
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    # getLevelName returns "Level X" for unknown names
    return level if isinstance(level, int) else default


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> int:
    """
    Configures the logger for the 'tiletrace' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG). When omitted it is read from
            TILETRACE_LOG_LEVEL, falling back to INFO.
        log_file: Optional path to save logs to a file.

    Returns:
        The level that was applied.
    """
    if level is None:
        level = level_from_env()

    logger = logging.getLogger("tiletrace")
    logger.setLevel(level)

    # Check if handlers already exist to avoid duplicate logs during reload/restart
    if logger.hasHandlers():
        logger.handlers.clear()

    # 1. Console Handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # Format: Time - Module - Level - Message
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    # 2. File Handler (Optional)
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized at %s.", logging.getLevelName(level))
    return level
