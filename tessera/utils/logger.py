"""
Tessera Logger
==============

Structured logging with pluggable handlers.

    logger = get_logger("tessera.parser")
    logger.debug("Parsed template", template="app:page", nodes=12)
"""

from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import orjson

from tessera.core.config import get_config


class LogLevel(IntEnum):
    """Log levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """Accept a level name ("debug") or number."""
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown log level: {value}") from None
        return cls(value)


@dataclass
class LogRecord:
    """
    Structured log record.

    Attributes:
        level: Log level
        message: Log message
        timestamp: Record timestamp
        context: Additional key-value context
        exception: Exception info
        logger_name: Name of the emitting logger
    """

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    logger_name: str = "tessera"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "message": self.message,
            "logger": self.logger_name,
        }
        if self.context:
            data["context"] = self.context
        if self.exception:
            data["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
            }
        return data

    def to_json(self) -> str:
        return orjson.dumps(self.to_dict(), default=str).decode("utf-8")


class LogFormatter:
    """Base log formatter."""

    def format(self, record: LogRecord) -> str:
        raise NotImplementedError


class TextFormatter(LogFormatter):
    """
    Plain text formatter.

    Example output:
        2024-01-15 10:30:45 [DEBUG] Parsed template template=page nodes=3
    """

    COLORS = {
        LogLevel.DEBUG: "\033[36m",
        LogLevel.INFO: "\033[32m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        format_string: Optional[str] = None,
        date_format: str = "%Y-%m-%d %H:%M:%S",
        colors: bool = True,
    ):
        self.format_string = format_string or "{timestamp} [{level}] {message}"
        self.date_format = date_format
        self.colors = colors and sys.stderr.isatty()

    def format(self, record: LogRecord) -> str:
        level = record.level.name
        if self.colors:
            level = f"{self.COLORS.get(record.level, '')}{level}{self.RESET}"

        message = record.message
        if record.context:
            pairs = " ".join(f"{k}={v}" for k, v in record.context.items())
            message = f"{message} {pairs}"

        output = self.format_string.format(
            timestamp=record.timestamp.strftime(self.date_format),
            level=level,
            message=message,
            logger=record.logger_name,
        )

        if record.exception:
            output += "\n" + "".join(traceback.format_exception(
                type(record.exception),
                record.exception,
                record.exception.__traceback__,
            ))
        return output


class JsonFormatter(LogFormatter):
    """JSON formatter for structured logging."""

    def __init__(self, pretty: bool = False):
        self.pretty = pretty

    def format(self, record: LogRecord) -> str:
        if self.pretty:
            option = orjson.OPT_INDENT_2
            return orjson.dumps(record.to_dict(), default=str, option=option).decode("utf-8")
        return record.to_json()


class LogHandler:
    """Base log handler."""

    def __init__(
        self,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        self.formatter = formatter or TextFormatter()
        self.level = level

    def handle(self, record: LogRecord) -> None:
        if record.level >= self.level:
            self.emit(record)

    def emit(self, record: LogRecord) -> None:
        raise NotImplementedError


class StreamHandler(LogHandler):
    """Stream output handler, stderr by default."""

    def __init__(
        self,
        stream: Any = None,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        super().__init__(formatter, level)
        self.stream = stream

    def emit(self, record: LogRecord) -> None:
        stream = self.stream or sys.stderr
        stream.write(self.formatter.format(record) + "\n")
        stream.flush()


class FileHandler(LogHandler):
    """Append-only file handler with size-based rotation."""

    def __init__(
        self,
        path: Union[str, Path],
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
        max_size: int = 10 * 1024 * 1024,
        backup_count: int = 3,
    ):
        super().__init__(formatter or JsonFormatter(), level)
        self.path = Path(path)
        self.max_size = max_size
        self.backup_count = backup_count
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: LogRecord) -> None:
        if self.path.exists() and self.path.stat().st_size > self.max_size:
            self._rotate()
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(self.formatter.format(record) + "\n")

    def _rotate(self) -> None:
        for i in range(self.backup_count - 1, 0, -1):
            src = self.path.with_suffix(f".{i}")
            if src.exists():
                src.replace(self.path.with_suffix(f".{i + 1}"))
        self.path.replace(self.path.with_suffix(".1"))


class Logger:
    """
    Structured logger.

    Example:
        logger = Logger("tessera.cli")
        logger.info("Checked templates", files=3)

        logger = logger.with_context(template="app:page")
        logger.warning("View not found", view="card")
    """

    def __init__(
        self,
        name: str = "tessera",
        level: LogLevel = LogLevel.WARNING,
        handlers: Optional[List[LogHandler]] = None,
    ):
        self.name = name
        self.level = level
        self._handlers = handlers if handlers is not None else []
        self._context: Dict[str, Any] = {}

    @property
    def handlers(self) -> List[LogHandler]:
        return self._handlers

    def add_handler(self, handler: LogHandler) -> "Logger":
        self._handlers.append(handler)
        return self

    def remove_handler(self, handler: LogHandler) -> "Logger":
        self._handlers.remove(handler)
        return self

    def with_context(self, **context: Any) -> "Logger":
        """Create a logger sharing handlers, with extra context on every record."""
        child = Logger(name=self.name, level=self.level, handlers=self._handlers)
        child._context = {**self._context, **context}
        return child

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def _log(
        self,
        level: LogLevel,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if level < self.level:
            return

        record = LogRecord(
            level=level,
            message=message,
            context={**self._context, **context},
            exception=exception,
            logger_name=self.name,
        )

        for handler in self._handlers:
            try:
                handler.handle(record)
            except Exception:
                pass  # Logging must never break parsing

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self._log(LogLevel.ERROR, message, exception, **context)


# Global logger registry
_loggers: Dict[str, Logger] = {}


def get_logger(name: str = "tessera", level: Optional[LogLevel] = None) -> Logger:
    """
    Get or create logger.

    New loggers write to stderr at the level given by the ``logging.level``
    configuration key unless a level is passed.
    """
    if name not in _loggers:
        if level is None:
            level = LogLevel.parse(get_config().get("logging.level", "WARNING"))
        logger = Logger(name=name, level=level)
        logger.add_handler(StreamHandler())
        _loggers[name] = logger
    return _loggers[name]


def configure_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    format: str = "text",
    log_file: Optional[str] = None,
    colors: bool = True,
) -> Logger:
    """
    Configure every tessera logger.

    Args:
        level: Log level
        format: Output format ("text" or "json")
        log_file: Optional log file path
        colors: Enable colored output

    Returns:
        The root "tessera" logger
    """
    level = LogLevel.parse(level)
    formatter: LogFormatter = JsonFormatter() if format == "json" else TextFormatter(colors=colors)

    handlers: List[LogHandler] = [StreamHandler(formatter=formatter, level=level)]
    if log_file:
        file_formatter = JsonFormatter() if format == "json" else TextFormatter(colors=False)
        handlers.append(FileHandler(log_file, formatter=file_formatter, level=level))

    root = get_logger("tessera")
    for logger in [root, *_loggers.values()]:
        logger.level = level
        logger.handlers[:] = handlers
    return root
