"""
logger.py
Logger setup shared by the command line tools.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from training.config import LOG_DATE_FORMAT, LOG_FORMAT


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: int = logging.INFO
) -> logging.Logger:
    """
    Create a logger writing to stderr and optionally to a file.

    Calling it again with the same name returns the configured logger
    without adding duplicate handlers.

    Args:
        name: Logger name
        log_file: Optional path of a log file (parent directories are created)
        level: Logging level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
