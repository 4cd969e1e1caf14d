"""
Observability - logging setup driven by the resolved logging view.
"""

from .logging_setup import (
    LogFormat,
    PrettyColoredFormatter,
    JsonFormatter,
    build_formatter,
    resolve_level,
    setup_logging
)

__all__ = [
    "LogFormat",
    "PrettyColoredFormatter",
    "JsonFormatter",
    "build_formatter",
    "resolve_level",
    "setup_logging",
]
