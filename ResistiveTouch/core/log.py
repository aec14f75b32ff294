# Central logging setup: console plus optional rotating file

import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-12s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str = "ResistiveTouch", level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the named logger once; later calls return it unchanged.

    Args:
        name: logger name, normally the package name so module loggers inherit it
        level: logging level or its name ("DEBUG", "INFO", ...)
        log_file: optional path for a rotating log (5 MB, 3 backups)
    """
    logger = logging.getLogger(name)

    # Already configured
    if logger.handlers:
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_from_settings(settings, name: str = "ResistiveTouch") -> logging.Logger:
    """setup_logger() driven by the [logging] section of a SettingsManager."""
    return setup_logger(name, settings.log_level(), settings.log_file())
