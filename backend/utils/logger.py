"""
Logger utility for the Clotheme backend
Provides consistent, colored console logging for the API routes
"""

import logging
import json
import os
import sys
from typing import Any, Dict, Optional

class CustomFormatter(logging.Formatter):
    """Custom formatter adding colors to log levels"""

    grey = "\x1b[38;20m"
    blue = "\x1b[34;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"

    base_format = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

    FORMATS = {
        logging.DEBUG: grey + base_format + reset,
        logging.INFO: blue + base_format + reset,
        logging.WARNING: yellow + base_format + reset,
        logging.ERROR: red + base_format + reset,
        logging.CRITICAL: bold_red + base_format + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.base_format)
        formatter = logging.Formatter(log_fmt, datefmt="%Y-%m-%d %H:%M:%S")
        return formatter.format(record)

class Logger:
    """Custom logger for the Clotheme backend"""

    def __init__(self, name: str, level: str = "INFO", log_dir: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        # Has its own handlers; the root console handler would print every line twice
        self.logger.propagate = False

        # get_logger may be called more than once per name
        if self.logger.handlers:
            return

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(CustomFormatter())
        self.logger.addHandler(console_handler)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(
                os.path.join(log_dir, f"{name}.log"),
                encoding='utf-8'
            )
            file_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S"
                )
            )
            self.logger.addHandler(file_handler)

    def _format_message(self, message: str, data: Optional[Dict[str, Any]] = None) -> str:
        """Format log message with optional data"""
        if data:
            return f"{message} {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.logger.debug(self._format_message(message, data))

    def info(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.logger.info(self._format_message(message, data))

    def warning(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.logger.warning(self._format_message(message, data))

    def error(self, message: str, error: Optional[Exception] = None, data: Optional[Dict[str, Any]] = None):
        """Log error message with optional exception details"""
        error_data = dict(data or {})
        if error:
            error_data.update({
                'error_type': type(error).__name__,
                'error_message': str(error),
            })
        self.logger.error(self._format_message(message, error_data), exc_info=error)

    def critical(self, message: str, error: Optional[Exception] = None, data: Optional[Dict[str, Any]] = None):
        """Log critical error message"""
        error_data = dict(data or {})
        if error:
            error_data.update({
                'error_type': type(error).__name__,
                'error_message': str(error),
            })
        self.logger.critical(self._format_message(message, error_data), exc_info=error)

ROOT_HANDLER_NAME = "clotheme-console"

def configure_root_logging(level: str = "INFO", stream=None) -> logging.Handler:
    """
    Sends records from plain logging.getLogger(__name__) loggers (the service modules)
    to a colored console handler. Calling it again replaces the previous handler.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        if handler.get_name() == ROOT_HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(ROOT_HANDLER_NAME)
    handler.setFormatter(CustomFormatter())
    root.addHandler(handler)
    return handler

def get_logger(name: str, level: str = "INFO", log_dir: Optional[str] = None) -> Logger:
    """Get a logger instance for the given name"""
    return Logger(name, level=level, log_dir=log_dir)
