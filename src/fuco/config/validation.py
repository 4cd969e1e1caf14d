"""
Configuration validation utilities.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..infrastructure.exceptions import InvalidConfigError, MissingConfigError

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ('APP_ENV', 'APP_PORT', 'JWT_SECRET')

OPTIONAL_KEYS = (
    'APP_HOST',
    'DATABASE_URL',
    'CORS_ORIGIN',
    'LOG_LEVEL',
    'LOG_FILE',
    'SESSION_SECRET',
    'REDIS_URL',
)

KNOWN_ENVIRONMENTS = ('development', 'staging', 'production', 'test')

PLACEHOLDER_JWT_SECRET = 'fuco-production-system-secret-key-2024'
MIN_SECRET_LENGTH = 32

LOOPBACK_HOSTS = ('localhost', '127.0.0.1', '::1')

_DATABASE_URL_PATTERN = re.compile(r'^(postgresql|mysql|mongodb)://.+')


class IssueSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding recorded while resolving configuration."""
    key: str
    severity: IssueSeverity
    message: str

    @classmethod
    def warning(cls, key: str, message: str) -> 'ValidationIssue':
        return cls(key, IssueSeverity.WARNING, message)

    @classmethod
    def error(cls, key: str, message: str) -> 'ValidationIssue':
        return cls(key, IssueSeverity.ERROR, message)

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.key}: {self.message}"


@dataclass(frozen=True)
class ProductionConfigIssue:
    """Non-fatal advisory about a production deployment."""
    code: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ProductionValidationResult:
    valid: bool
    issues: List[str] = field(default_factory=list)
    details: List[ProductionConfigIssue] = field(default_factory=list)


def is_present(values: Mapping[str, Any], key: str) -> bool:
    """A key counts as present when it is set to a non-empty value."""
    value = values.get(key)
    return value is not None and value != ''


class ConfigurationValidator:
    """Validates merged configuration values and reports issues."""

    def __init__(
        self,
        required_keys: Sequence[str] = REQUIRED_KEYS,
        optional_keys: Sequence[str] = OPTIONAL_KEYS,
    ):
        self.required_keys = tuple(required_keys)
        self.optional_keys = tuple(optional_keys)

    def validate(self, values: Mapping[str, Any], environment: str) -> List[ValidationIssue]:
        """
        Validate merged flat configuration values.

        Args:
            values: Merged key -> raw value mapping
            environment: Current environment name

        Returns:
            List of warning issues

        Raises:
            MissingConfigError: If any required key is absent
            InvalidConfigError: If the port is not an integer in [1, 65535]
        """
        missing = [key for key in self.required_keys if not is_present(values, key)]
        if missing:
            raise MissingConfigError(missing)

        warnings = [
            ValidationIssue.warning(key, f"Recommended configuration key is not set: {key}")
            for key in self.optional_keys
            if not is_present(values, key)
        ]

        warnings.extend(self._validate_values(values, environment))
        return warnings

    def _validate_values(self, values: Mapping[str, Any], environment: str) -> List[ValidationIssue]:
        warnings = []

        if environment not in KNOWN_ENVIRONMENTS:
            warnings.append(ValidationIssue.warning('APP_ENV', f"Unknown environment: {environment}"))

        if 'APP_PORT' in self.required_keys or is_present(values, 'APP_PORT'):
            validate_port(values.get('APP_PORT'))

        secret = values.get('JWT_SECRET')
        if environment == 'production' and secret is not None and len(str(secret)) < MIN_SECRET_LENGTH:
            warnings.append(ValidationIssue.warning(
                'JWT_SECRET',
                f"JWT secret is shorter than {MIN_SECRET_LENGTH} characters in production"
            ))

        database_url = values.get('DATABASE_URL')
        if is_present(values, 'DATABASE_URL') and not _DATABASE_URL_PATTERN.match(str(database_url)):
            warnings.append(ValidationIssue.warning('DATABASE_URL', "Database URL format may be incorrect"))

        return warnings


def validate_port(raw: Any) -> int:
    """
    Parse a network port.

    Raises:
        InvalidConfigError: If the value is not an integer in [1, 65535]
    """
    try:
        port = int(str(raw).strip())
    except (TypeError, ValueError):
        raise InvalidConfigError(f"Invalid port number: {raw}", key='APP_PORT', value=raw) from None

    if port < 1 or port > 65535:
        raise InvalidConfigError(f"Invalid port number: {raw}", key='APP_PORT', value=raw)
    return port


def validate_production(
    jwt_secret: Optional[str],
    database_url: Optional[str],
    log_level: Any,
    cors_origins: Iterable[str],
) -> ProductionValidationResult:
    """Collect advisories for a production deployment. Never raises."""
    details = []

    if jwt_secret == PLACEHOLDER_JWT_SECRET:
        details.append(ProductionConfigIssue(
            'placeholder_jwt_secret',
            f"JWT secret is the placeholder value '{PLACEHOLDER_JWT_SECRET}', not suitable for production"
        ))

    if jwt_secret and len(jwt_secret) < MIN_SECRET_LENGTH:
        details.append(ProductionConfigIssue(
            'short_jwt_secret',
            f"JWT secret is too short, use at least {MIN_SECRET_LENGTH} characters"
        ))

    if not database_url:
        details.append(ProductionConfigIssue('missing_database_url', "DATABASE_URL is not set in production"))

    if str(log_level).lower() == 'debug':
        details.append(ProductionConfigIssue('debug_log_level', "debug log level is not recommended in production"))

    loopback = [origin for origin in cors_origins if any(host in origin for host in LOOPBACK_HOSTS)]
    if loopback:
        details.append(ProductionConfigIssue(
            'loopback_cors_origin',
            f"CORS origins include a loopback host: {', '.join(loopback)}"
        ))

    for issue in details:
        logger.warning("Production configuration issue: %s", issue.message)

    return ProductionValidationResult(
        valid=not details,
        issues=[issue.message for issue in details],
        details=details
    )
