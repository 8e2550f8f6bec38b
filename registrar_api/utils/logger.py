"""
Centralized logging configuration with colored output

Handlers live on the package logger only; module loggers from get_logger
carry none of their own and propagate to it.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
import colorlog

from registrar_api.utils.config import get_settings


LOGS_DIR = Path("logs")

PACKAGE_LOGGER = "registrar_api"


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True
) -> logging.Logger:
    """
    Attach colored console output and optional file logging to a logger.

    Called once for the package logger; call it again with another name
    only for a logger that must not propagate into the package one.

    Args:
        name: Logger name, the package logger by default
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file name (saved in logs/ directory)
        console: Whether to output to stderr

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    if console:
        console_handler = colorlog.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s%(levelname)-8s%(reset)s %(blue)s[%(name)s]%(reset)s %(message)s",
            reset=True,
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        ))
        logger.addHandler(console_handler)

    if log_file:
        LOGS_DIR.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(LOGS_DIR / log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a module logger under the package logger.

    The package logger is configured from settings (log_level, log_file)
    the first time any module asks for a logger.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Optional level override for this logger alone

    Returns:
        Logger without handlers of its own
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        settings = get_settings()
        setup_logger(PACKAGE_LOGGER, level=settings.log_level, log_file=settings.log_file)

    logger = logging.getLogger(name)
    if level:
        logger.setLevel(getattr(logging, level.upper()))
    return logger
