"""Logging setup for the catalog client.

The library only creates module loggers; handlers are attached by
setup_logging(), which the command-line client calls once at startup.

Environment:
    CATALOG_LOG_LEVEL: Level name for the "catalog" logger (default INFO)
    CATALOG_LOG_FILE: Optional path of a rotating log file
    LOG_FILE_MAX_BYTES: Rotation size in bytes (default 10 MB)
    LOG_FILE_BACKUP_COUNT: Rotated files kept (default 5)
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import colorlog

PACKAGE_LOGGER = "catalog"

CONSOLE_FORMAT = "%(log_color)s%(levelname)s:%(name)s:%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s - (%(filename)s:%(lineno)d)"

LOG_COLORS = {
    'DEBUG': 'bold_blue',
    'INFO': 'bold_green',
    'WARNING': 'bold_yellow',
    'ERROR': 'bold_red',
    'CRITICAL': 'bold_purple',
}


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the catalog logger.

    Calling it again only updates the level, so handlers are never doubled.

    Args:
        level: Level name overriding CATALOG_LOG_LEVEL (e.g. "DEBUG")

    Returns:
        The configured "catalog" logger
    """
    log_level = (level or os.getenv('CATALOG_LOG_LEVEL', 'INFO')).upper()

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(colorlog.ColoredFormatter(CONSOLE_FORMAT, log_colors=LOG_COLORS))
        logger.addHandler(console_handler)

        log_file = os.getenv('CATALOG_LOG_FILE')
        if log_file:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=int(os.getenv('LOG_FILE_MAX_BYTES', '10485760')),
                backupCount=int(os.getenv('LOG_FILE_BACKUP_COUNT', '5')),
            )
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(logging.DEBUG if log_level == 'DEBUG' else logging.WARNING)
    return logger
