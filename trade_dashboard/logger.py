"""
Logging configuration for the trade monitor dashboard
"""
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import Config, env_flag_disabled

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s'


class StreamAccessFilter(logging.Filter):
    """
    Filter that keeps long-lived SSE connections out of the console.
    WARNING+ always passes. INFO access-log lines for the stream routes are
    blocked; every other record passes.
    """

    ACCESS_LOGGER = 'aiohttp.access'
    STREAM_PREFIX = '/stream/'

    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True

        if record.name != self.ACCESS_LOGGER:
            return True

        # Access records are formatted lazily, the request line is in the message
        return self.STREAM_PREFIX not in record.getMessage()


def _log_file(log_file: Optional[str]) -> Optional[str]:
    if log_file is None:
        log_file = Config.LOG_FILE
    if env_flag_disabled(log_file):
        return None
    return log_file


def _rotating_file_handler(path: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)  # 10MB x 5
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_level: str = None, log_file: str = None) -> logging.Logger:
    """
    Route the dashboard's logs to the console and, when LOG_FILE is set, a rotating file.

    Args:
        log_level: Root level name, defaults to Config.LOG_LEVEL
        log_file: Log file path, defaults to Config.LOG_FILE ('' / 'none' disables it)
    """
    level = (log_level or Config.LOG_LEVEL).upper()
    path = _log_file(log_file)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    console_handler.addFilter(StreamAccessFilter())
    root_logger.addHandler(console_handler)

    if path:
        root_logger.addHandler(_rotating_file_handler(path))

    return root_logger
