"""Broker logging.

Every service logs through one named logger configured once from
Settings at startup. Modules fetch it lazily with get_app_logger() so that
tests and scripts which never call init_app_logger still get output.
"""

import logging
import os
from typing import Optional


APP_LOGGER_NAME = "inquiry_broker"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def _file_handler(log_file: str, level: int) -> logging.FileHandler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(_formatter())
    return handler


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure a logger writing to the console and, optionally, a file.

    Handlers are attached only on the first call for a given name; later
    calls just adjust the level.

    Args:
        name: Logger name
        log_level: Level name; unknown names fall back to INFO
        log_file: Log file path, empty or None for console only

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(_formatter())
    logger.addHandler(console)

    if log_file:
        logger.addHandler(_file_handler(log_file, level))

    return logger


app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """
    Configure the broker logger from settings.

    ``settings.debug`` forces DEBUG regardless of ``settings.log_level``.
    """
    global app_logger

    level = "DEBUG" if getattr(settings, "debug", False) else settings.log_level
    app_logger = setup_logger(APP_LOGGER_NAME, level, settings.log_file or None)
    app_logger.debug(f"Logger initialized at {logging.getLevelName(app_logger.level)}")
    return app_logger


def get_app_logger() -> logging.Logger:
    """Return the broker logger, configuring console defaults on first use."""
    if app_logger is None:
        return setup_logger(APP_LOGGER_NAME)
    return app_logger
