"""
Logging configuration for the Rosetta gateway
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

# 50MB per file, 10 files kept
MAX_LOG_BYTES = 50 * 1024 * 1024
LOG_BACKUP_COUNT = 10

NOISY_LOGGERS = ('httpx', 'httpcore', 'hpack', 'aiohttp.access', 'urllib3')


def setup_logging(logger_name: str, log_level: Union[int, str] = logging.INFO,
                  log_dir: Optional[str] = None) -> logging.Logger:
    """
    Set up logging configuration for a specific logger

    Args:
        logger_name: Name of the logger to configure
        log_level: Logging level to use
        log_dir: Directory for the rotating log file, console only when None

    Returns:
        logging.Logger: Configured logger instance
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Remove any existing handlers
    logger.handlers = []

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(name)s: %(message)s'))
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path / f"{logger_name.replace('.', '_')}.log",
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
