import logging
import sys
from typing import Optional, Union

APP_NAME = "pvz"
logger = logging.getLogger(APP_NAME)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s'


def setup_logging(
        level: Union[int, str] = logging.WARNING,
        format_string: Optional[str] = None,
        stream=None,
        log_file: Optional[str] = None
) -> None:
    """
    Configures the service logger.

    Args:
        level: logging level, numeric or by name ("INFO")
        format_string: record format
        stream: stream for the console handler (stderr by default)
        log_file: optional path of a log file
    """
    level = as_level(level)
    if format_string is None:
        format_string = DEFAULT_FORMAT

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if stream is None:
        stream = sys.stderr

    formatter = logging.Formatter(format_string)
    handlers = []

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        except OSError as e:
            logger.error("unable to create file handler: log_file=%s, error=%s", log_file, e)

    for handler in handlers:
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False

    logger.debug("logging initialized for %s", APP_NAME)


def as_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def set_log_level(level: Union[int, str]) -> None:
    level = as_level(level)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


setup_logging()
