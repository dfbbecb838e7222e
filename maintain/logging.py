"""Logging configuration for maintain.

Only the CLI (and the test session) calls setup_logging. When maintain is used as a
library the root logger is left alone.
"""

import copy
from enum import IntEnum
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click
from pythonjsonlogger import jsonlogger
from rich.logging import RichHandler

from maintain.settings import MAINTAIN_DIRECTORY

DATE_FORMAT = "%d%b %H:%M:%S"
MAX_LOG_BYTES = int(1e8)

# database credentials may travel through procedure parameters
SENSITIVE_FIELDS = ("password", "db_password", "token", "admin_password")


class LOG_LEVEL(IntEnum):
    """Log levels with custom TRACE level."""

    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


logging.addLevelName(LOG_LEVEL.TRACE, "TRACE")


class RedactingFilter(logging.Filter):
    """Replace sensitive values in log record arguments with asterisks."""

    def __init__(self, sensitive):
        super().__init__()
        self._sensitive = set(sensitive)

    def filter(self, record):
        if isinstance(record.args, dict):
            record.args = self.redact(record.args)
        elif record.args:
            record.args = tuple(self.redact(arg) for arg in record.args)
        return True

    def redact(self, data):
        if isinstance(data, list | tuple):
            return [self.redact(item) for item in data]
        if not isinstance(data, dict):
            return data
        redacted = copy.deepcopy(data)
        for key, value in redacted.items():
            if isinstance(value, dict | list):
                redacted[key] = self.redact(value)
            elif key in self._sensitive and value:
                redacted[key] = "******"
        return redacted


def resolve_log_level(level):
    """Map a level name or number onto LOG_LEVEL, falling back to INFO."""
    if isinstance(level, str):
        return LOG_LEVEL.__members__.get(level.upper(), LOG_LEVEL.INFO)
    if isinstance(level, int) and level in LOG_LEVEL._value2member_map_:
        return LOG_LEVEL(level)
    return LOG_LEVEL.INFO


def _log_file(log_path):
    path = Path(log_path)
    if not path.is_absolute():
        path = MAINTAIN_DIRECTORY / path
    if not path.suffix:
        path = path / "maintain.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _rotating_handler(path, level, formatter, redactor):
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=3)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(redactor)
    return handler


def _configured(option, default):
    from maintain.settings import settings

    return (settings.get("LOGGING") or {}).get(option, default)


def setup_logging(console_level=None, file_level=None, log_path=None, structured=None):
    """Configure the root logger for CLI use.

    Any argument left as None is read from the LOGGING section of maintain's settings.

    Args:
        console_level: level name for the rich console handler, or "silent"
        file_level: level name for the rotating log file, or "silent"
        log_path: log file or directory, relative paths land under MAINTAIN_DIRECTORY
        structured: also write a JSON log next to the text log
    """
    console_level = console_level or _configured("console_level", "info")
    file_level = file_level or _configured("file_level", "debug")
    log_path = log_path or _configured("log_path", "logs/maintain.log")
    if structured is None:
        structured = _configured("structured", False)

    console_log_level = resolve_log_level(console_level)
    file_log_level = resolve_log_level(file_level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(min(console_log_level, file_log_level))
    redactor = RedactingFilter(SENSITIVE_FIELDS)

    if console_level != "silent":
        console_handler = RichHandler(
            rich_tracebacks=True,
            tracebacks_suppress=[click],
            show_path=console_log_level <= LOG_LEVEL.DEBUG,
            markup=True,
        )
        console_handler.setLevel(console_log_level)
        console_handler.setFormatter(logging.Formatter("%(message)s", datefmt=DATE_FORMAT))
        console_handler.addFilter(redactor)
        root_logger.addHandler(console_handler)

    if file_level == "silent":
        return

    log_file = _log_file(log_path)
    root_logger.addHandler(
        _rotating_handler(
            log_file,
            file_log_level,
            logging.Formatter(
                "[%(levelname)s %(asctime)s %(name)s:%(lineno)d] %(message)s", datefmt=DATE_FORMAT
            ),
            redactor,
        )
    )
    if structured:
        root_logger.addHandler(
            _rotating_handler(
                log_file.with_suffix(log_file.suffix + ".json"),
                file_log_level,
                jsonlogger.JsonFormatter(
                    "%(asctime)s %(name)s %(levelname)s %(message)s",
                    rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
                    datefmt=DATE_FORMAT,
                ),
                redactor,
            )
        )
