"""
Logging configuration for the performance validation harness.

Every module gets its logger via `logger = setup_logger(__name__)`. Terminal
output is kept to `[LEVEL] message`; the optional log file gets timestamps and
logger names. HARNESS_LOG_LEVEL and HARNESS_LOG_FILE override the defaults,
which is how long soak runs are usually captured to disk.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV = "HARNESS_LOG_LEVEL"
LOG_FILE_ENV = "HARNESS_LOG_FILE"

CONSOLE_FORMAT = '[%(levelname)s] %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
FILE_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _level_from_env() -> int:
    level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _file_from_env() -> Optional[Path]:
    value = os.environ.get(LOG_FILE_ENV)
    return Path(value) if value else None


def setup_logger(
    name: str,
    level: Optional[int] = None,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure and return a harness logger.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default: HARNESS_LOG_LEVEL, else INFO)
        log_file: Extra file destination (default: HARNESS_LOG_FILE, if set)

    Returns:
        Configured logger instance
    """
    level = _level_from_env() if level is None else level
    log_file = _file_from_env() if log_file is None else log_file

    logger = logging.getLogger(name)
    logger.setLevel(level)
    # setup_logger may run more than once for the same name
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        logger.addHandler(to_file)

    logger.propagate = False
    return logger
