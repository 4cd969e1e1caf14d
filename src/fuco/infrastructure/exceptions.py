"""
Structured Exception Hierarchy

Provides the exception hierarchy used by the FUCO configuration core, with
contextual information for error handling and diagnostics.
"""

from typing import Dict, List, Any, Optional
import uuid
from datetime import datetime, timezone


class FucoException(Exception):
    """
    Base exception class for all FUCO-specific exceptions.

    Provides structured error information including error codes,
    context data, and correlation IDs for tracing.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ConfigurationError(FucoException):
    """Raised when configuration-related errors occur."""

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
        error_code: str = "CONFIG_ERROR",
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if config_path:
            context['config_path'] = config_path
        if validation_errors:
            context['validation_errors'] = validation_errors

        super().__init__(
            message=message,
            error_code=error_code,
            context=context,
            **kwargs
        )


class MissingConfigError(ConfigurationError):
    """Raised when required keys are absent after all sources are merged."""

    def __init__(self, missing_keys: List[str], **kwargs):
        self.missing_keys = list(missing_keys)
        context = kwargs.pop('context', {})
        context['missing_keys'] = self.missing_keys
        super().__init__(
            f"Missing required configuration keys: {', '.join(self.missing_keys)}",
            error_code="CONFIG_MISSING",
            context=context,
            **kwargs
        )


class InvalidConfigError(ConfigurationError):
    """Raised when a present value violates a domain constraint."""

    def __init__(self, message: str, key: str, value: Any = None, **kwargs):
        self.key = key
        self.value = value
        context = kwargs.pop('context', {})
        context['key'] = key
        context['value'] = value
        super().__init__(
            message,
            error_code="CONFIG_INVALID",
            context=context,
            **kwargs
        )


class ConfigFileWarning(ConfigurationError):
    """
    Raised by a configuration source whose file exists but cannot be used.

    The resolver catches it, records a warning and skips the source.
    """

    def __init__(self, message: str, file_path: str, **kwargs):
        self.file_path = file_path
        super().__init__(
            message,
            config_path=file_path,
            error_code="CONFIG_FILE_UNREADABLE",
            **kwargs
        )
