"""Logging utilities for Nemoprefs."""

import json
import logging
import sys
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


_LOG_RECORD_FIELDS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
    "stacklevel",
}


class StructuredFormatter(logging.Formatter):
    """Formatter with ISO timestamps and context."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return timestamp.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _LOG_RECORD_FIELDS and not key.startswith("_")
        }
        if extras:
            try:
                serialized = json.dumps(extras, sort_keys=True, ensure_ascii=True, default=str)
            except (TypeError, ValueError):
                serialized = str(extras)
            return f"{message} | {serialized}"
        return message


class NemoLogger:
    """Logger for Nemoprefs."""

    def __init__(self, name: str = "nemoprefs") -> None:
        self.logger = logging.getLogger(name)
        level_name = os.getenv("NEMO_LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)
        # File handlers capture debug output; the console respects the configured level.
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_formatter = logging.Formatter("%(levelname)s: %(message)s")
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        self._file_handler: Optional[logging.Handler] = None
        self._file_handler_path: Optional[Path] = None

    def attach_file_handler(self, log_file: Path) -> Path:
        """Attach or replace a file handler for logging to disk."""
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if self._file_handler and self._file_handler_path == log_file:
            return log_file

        if self._file_handler:
            try:
                self.logger.removeHandler(self._file_handler)
            except (ValueError, RuntimeError):
                # Console logging continues even if the old handler cannot be detached.
                pass
            self._file_handler.close()

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter("%(asctime)s [%(levelname)s] %(message)s"))
        self.logger.addHandler(file_handler)
        self._file_handler = file_handler
        self._file_handler_path = log_file
        return log_file

    def log(self, level: int, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a message at an explicit numeric level."""
        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.error(message, *args, **kwargs)


# Global logger instance
_logger: Optional[NemoLogger] = None


def get_logger() -> NemoLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = NemoLogger()
    return _logger


def init_logger(log_dir: Optional[Path] = None) -> NemoLogger:
    """Return the global logger, writing to today's file in ``log_dir`` when given.

    Repeated calls reuse the same instance, so the file handler is replaced
    rather than stacked.
    """
    logger = get_logger()
    if log_dir:
        log_file = log_dir / f"nemoprefs_{datetime.now().strftime('%Y%m%d')}.log"
        logger.attach_file_handler(log_file)
    return logger
