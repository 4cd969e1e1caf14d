import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

from ..config.coercion import parse_size
from ..config.models import LoggingConfig

ROOT_LOGGER_NAME = "fuco"


class LogFormat(Enum):
    SIMPLE = "simple"
    JSON = "json"


# ANSI color codes
RESET = "\033[0m"
COLORS = {
    "DEBUG": "\033[37m",   # White
    "INFO": "\033[36m",    # Cyan
    "WARNING": "\033[33m", # Yellow
    "ERROR": "\033[31m",   # Red
    "CRITICAL": "\033[41m\033[97m",  # White on Red background
    "TIME": "\033[90m",    # Gray for timestamps
    "MODULE": "\033[35m",  # Magenta
    "MESSAGE": "\033[0m",  # Default
}

# Level names used by the backend that differ from the stdlib ones
_LEVEL_ALIASES = {
    "warn": "WARNING",
    "verbose": "DEBUG",
    "silly": "DEBUG",
}

_STD_RECORD_KEYS = frozenset((
    "args", "msg", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno",
    "funcName", "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "name", "taskName",
))


class PrettyColoredFormatter(logging.Formatter):
    """
    Pretty, human-readable formatter.
    Format:
    2025-08-13 14:35:12.345 UTC | INFO     | resolver:123 | Configuration resolved
    """

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def _paint(self, key: str, text: str) -> str:
        if not self.use_colors:
            return text
        return f"{COLORS.get(key, '')}{text}{RESET}"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        message = self._paint("MESSAGE", record.getMessage())

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return " | ".join((
            self._paint("TIME", f"{timestamp} UTC"),
            self._paint(record.levelname, f"{record.levelname:<8}"),
            self._paint("MODULE", f"{record.module}:{record.lineno}"),
            message,
        ))


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # Merge extra attributes passed through `extra=`
        for k, v in record.__dict__.items():
            if k in _STD_RECORD_KEYS:
                continue
            try:
                json.dumps(v)
                base[k] = v
            except (TypeError, ValueError):
                base[k] = str(v)
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, separators=(",", ":"))


def resolve_level(level: str) -> int:
    """Map a configured level name such as ``info`` or ``warn`` to a logging level."""
    name = _LEVEL_ALIASES.get(level.lower(), level.upper())
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def build_formatter(log_format: str, use_colors: bool = True) -> logging.Formatter:
    if log_format == LogFormat.SIMPLE.value:
        return PrettyColoredFormatter(use_colors=use_colors)
    if log_format == LogFormat.JSON.value:
        return JsonFormatter()
    raise ValueError(f"Unknown log format: {log_format}")


def setup_logging(
    config: LoggingConfig,
    logger_name: str = ROOT_LOGGER_NAME,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure the ``fuco`` logger from the logging view.

    A console handler is attached when ``config.console`` is set, and a
    rotating file handler on ``config.file`` sized by ``max_size`` and
    ``max_files``.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(resolve_level(config.level))

    handlers = []
    if config.console:
        stream = stream or sys.stdout
        console = logging.StreamHandler(stream)
        console.setFormatter(build_formatter(config.format, use_colors=stream.isatty()))
        handlers.append(console)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=parse_size(config.max_size),
            backupCount=config.max_files,
            encoding="utf-8",
        )
        file_handler.setFormatter(build_formatter(config.format, use_colors=False))
        handlers.append(file_handler)

    for handler in logger.handlers:
        handler.close()
    logger.handlers = handlers
    logger.propagate = False
    return logger
