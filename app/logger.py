"""
Structured JSON Logging Module.

Every component logs one JSON object per line through an injected
``StructuredLogger``.  Auth events carry the user's email and id under
``extra``; credentials never reach the log because the formatter masks
the keys listed in ``REDACTED_KEYS``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, TextIO

if TYPE_CHECKING:
    from app.config import AppConfig

REDACTED_KEYS: frozenset[str] = frozenset({
    "password",
    "access_token",
    "refresh_token",
    "session_token",
    "supabase_key",
})
_MASK: str = "***"


class JSONFormatter(logging.Formatter):
    """Formats log records as structured JSON objects.

    Each log entry contains:
        - timestamp  (ISO-8601, UTC)
        - level
        - logger_name
        - message
        - extra      (fields passed via the ``extra`` kwarg, credentials masked)
        - exception  (formatted traceback, when present)
    """

    # Standard LogRecord attribute names, computed once.
    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime"}

    @staticmethod
    def _json_value(key: str, value: Any) -> Any:
        if key in REDACTED_KEYS:
            return _MASK
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        return str(value)

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra_fields = {
            key: self._json_value(key, value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)


class StructuredLogger:
    """Injectable JSON logger.

    Writes to *stream* (stdout by default) and, unless ``log_file`` is
    empty, to a size-rotated file.  Handlers are attached once per logger
    name, so building a second ``StructuredLogger`` with the same name
    reuses the first one's output.

    Usage::

        log = StructuredLogger.from_config("auth", get_config())
        log.info("User signed out: %s", email, extra={"event": "SIGN_OUT"})
    """

    DEFAULT_LOG_FILE: str = "vaccination_registry.log"
    DEFAULT_MAX_BYTES: int = 5_242_880
    DEFAULT_BACKUP_COUNT: int = 3

    def __init__(
        self,
        name: str = "registry",
        level: int = logging.INFO,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
    ) -> None:
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(level)

        if self._logger.handlers:
            return

        formatter = JSONFormatter()
        self._add_handler(logging.StreamHandler(stream or sys.stdout), level, formatter)

        path = self.DEFAULT_LOG_FILE if log_file is None else log_file
        if path:
            self._add_file_handler(path, level, formatter, max_bytes, backup_count)

    @classmethod
    def from_config(cls, name: str, config: "AppConfig") -> "StructuredLogger":
        """Build a logger with the level and file settings from *config*."""
        return cls(
            name=name,
            level=config.log_level,
            log_file=config.LOG_FILE,
            max_bytes=config.LOG_MAX_BYTES,
            backup_count=config.LOG_BACKUP_COUNT,
        )

    def _add_handler(
        self, handler: logging.Handler, level: int, formatter: logging.Formatter,
    ) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        self._logger.addHandler(handler)

    def _add_file_handler(
        self,
        path: str,
        level: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
    ) -> None:
        try:
            log_path = Path(path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Could not create log file '%s': %s. Continuing with console logging only.",
                path,
                exc,
            )
            return
        self._add_handler(handler, level, formatter)

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying ``logging.Logger`` directly."""
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)


def get_logger(name: str = "registry") -> StructuredLogger:
    """Console-and-file logger with default settings, for callers without a config."""
    return StructuredLogger(name=name)
