"""
Core configuration resolver.

Resolves layered sources (process environment, ``.env`` family files, JSON
config files) into a validated snapshot and derives the structured views
consumed by server, database and logging setup.
"""

import copy
import logging
import secrets
import string
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ValidationError

from ..infrastructure.exceptions import ConfigFileWarning, InvalidConfigError
from .coercion import parse_value
from .models import (
    DatabaseConfig,
    FeatureFlags,
    LoggingConfig,
    ResolvedConfig,
    ServerConfig
)
from .sources import (
    ConfigurationSource,
    DotEnvConfigurationSource,
    EnvironmentConfigurationSource,
    StructuredFileConfigurationSource,
    ENV_BASE_FILE_PRIORITY,
    ENV_LOCAL_FILE_PRIORITY,
    ENV_TIER_FILE_PRIORITY,
    PROJECT_CONFIG_PRIORITY,
    TIER_CONFIG_PRIORITY,
    DEFAULT_CONFIG_PRIORITY
)
from .validation import (
    OPTIONAL_KEYS,
    REQUIRED_KEYS,
    ConfigurationValidator,
    ProductionValidationResult,
    ValidationIssue,
    is_present,
    validate_production
)

logger = logging.getLogger(__name__)

ENVIRONMENT_KEY = 'APP_ENV'
DEFAULT_ENVIRONMENT = 'development'
REDACTED = '[HIDDEN]'

SECRET_ALPHABET = string.ascii_letters + string.digits + '!@#$%^&*'

DEFAULT_VALUES = {
    'APP_HOST': '0.0.0.0',
    'LOG_LEVEL': 'info',
    'LOG_FILE': 'logs/fuco.log',
    'CORS_ORIGIN': 'http://localhost:8847,http://localhost:3000',
    'ENABLE_MONITORING': 'true',
    'ENABLE_REPORTS': 'true',
    'MAX_REQUEST_SIZE': '10mb',
    'REQUEST_TIMEOUT': '30000',
    'RATE_LIMIT_WINDOW': '900000',
    'RATE_LIMIT_MAX': '100',
}

ViewT = TypeVar('ViewT', bound=BaseModel)


def generate_secret(length: int = 64) -> str:
    """Generate a random secret drawn from letters, digits and symbols."""
    return ''.join(secrets.choice(SECRET_ALPHABET) for _ in range(length))


class ConfigResolver:
    """
    Layered configuration resolver.

    Sources are read in fixed precedence order, highest first:

    1. process environment
    2. ``.env.<environment>``
    3. ``.env.local``
    4. ``.env``
    5. ``fuco.config.json``
    6. ``config/<environment>.json``
    7. ``config/default.json``

    Flat sources (environment and ``.env`` files) merge first-writer-wins.
    Structured files merge with a shallow overwrite, lowest precedence
    first. The resolver loads eagerly; afterwards only ``set()`` changes it.
    """

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        required_keys: Sequence[str] = REQUIRED_KEYS,
        optional_keys: Sequence[str] = OPTIONAL_KEYS,
        extra_sources: Optional[List[ConfigurationSource]] = None,
        secret_factory: Callable[[], str] = generate_secret,
        autoload: bool = True
    ):
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self._environ = environ
        self._validator = ConfigurationValidator(required_keys, optional_keys)
        self._extra_sources = list(extra_sources or [])
        self._secret_factory = secret_factory
        self._session_secret: Optional[str] = None

        self._environment = DEFAULT_ENVIRONMENT
        self._values: Dict[str, Any] = {}
        self._structured: Dict[str, Any] = {}
        self._source_issues: List[ValidationIssue] = []
        self._validation_issues: List[ValidationIssue] = []

        if autoload:
            self.load()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def load(self) -> ResolvedConfig:
        """
        Read every source, merge, validate and fill defaults.

        The resolver state is replaced only when resolution succeeds; a
        failed reload leaves the previous configuration in place.

        Raises:
            MissingConfigError: If a required key is absent after the merge
            InvalidConfigError: If a value violates a domain constraint
        """
        environment = self._detect_environment()
        sources = self._sources_for(environment)

        values: Dict[str, Any] = {}
        structured: Dict[str, Any] = {}
        issues: List[ValidationIssue] = []

        for source in sorted(self._flat_sources(sources), key=lambda s: s.get_priority(), reverse=True):
            data = self._read_source(source, issues)
            for key, value in data.items():
                if not is_present(values, key):
                    values[key] = value

        for source in sorted(self._structured_sources(sources), key=lambda s: s.get_priority()):
            data = self._read_source(source, issues)
            structured = {**structured, **data}

        warnings = self._check(values, environment)
        self._apply_defaults(values)

        self._environment = environment
        self._values = values
        self._structured = structured
        self._source_issues = issues
        self._validation_issues = warnings

        logger.info("Configuration resolved for environment '%s'", self._environment)
        return self.resolved

    def validate(self) -> List[ValidationIssue]:
        """
        Validate the merged values and record warnings.

        Raises:
            MissingConfigError: If any required key is absent
            InvalidConfigError: If the port is not an integer in [1, 65535]
        """
        self._validation_issues = self._check(self._values, self._environment)
        return list(self._validation_issues)

    def set_defaults(self) -> None:
        """Fill default values for keys that are still absent."""
        self._apply_defaults(self._values)

    def _check(self, values: Dict[str, Any], environment: str) -> List[ValidationIssue]:
        warnings = self._validator.validate(values, environment)
        for issue in warnings:
            logger.warning("Configuration warning: %s", issue.message)
        return warnings

    def _apply_defaults(self, values: Dict[str, Any]) -> None:
        for key, value in DEFAULT_VALUES.items():
            if not is_present(values, key):
                values[key] = value

        if not is_present(values, 'SESSION_SECRET'):
            if self._session_secret is None:
                self._session_secret = self._secret_factory()
            values['SESSION_SECRET'] = self._session_secret

    def get_sources(self) -> List[ConfigurationSource]:
        """Sources for the current environment, including registered extras."""
        return self._sources_for(self._environment)

    def _sources_for(self, env: str) -> List[ConfigurationSource]:
        base = self.base_dir
        return [
            EnvironmentConfigurationSource(self._environ),
            DotEnvConfigurationSource(base / f'.env.{env}', ENV_TIER_FILE_PRIORITY),
            DotEnvConfigurationSource(base / '.env.local', ENV_LOCAL_FILE_PRIORITY),
            DotEnvConfigurationSource(base / '.env', ENV_BASE_FILE_PRIORITY),
            StructuredFileConfigurationSource(base / 'fuco.config.json', PROJECT_CONFIG_PRIORITY),
            StructuredFileConfigurationSource(base / 'config' / f'{env}.json', TIER_CONFIG_PRIORITY),
            StructuredFileConfigurationSource(base / 'config' / 'default.json', DEFAULT_CONFIG_PRIORITY),
        ] + self._extra_sources

    def well_known_files(self) -> List[Tuple[str, Path]]:
        env = self._environment
        names = ['.env', f'.env.{env}', '.env.local', 'fuco.config.json', f'config/{env}.json', 'config/default.json']
        return [(name, self.base_dir / name) for name in names]

    def _detect_environment(self) -> str:
        # The tier file cannot name its own environment
        env_value = EnvironmentConfigurationSource(self._environ).load().get(ENVIRONMENT_KEY)
        if env_value:
            return env_value

        for name in ('.env.local', '.env'):
            try:
                env_value = DotEnvConfigurationSource(self.base_dir / name, 0).load().get(ENVIRONMENT_KEY)
            except ConfigFileWarning:
                # Recorded when the source itself is loaded
                continue
            if env_value:
                return env_value

        return DEFAULT_ENVIRONMENT

    @staticmethod
    def _flat_sources(sources: List[ConfigurationSource]) -> List[ConfigurationSource]:
        return [s for s in sources if not isinstance(s, StructuredFileConfigurationSource)]

    @staticmethod
    def _structured_sources(sources: List[ConfigurationSource]) -> List[ConfigurationSource]:
        return [s for s in sources if isinstance(s, StructuredFileConfigurationSource)]

    @staticmethod
    def _read_source(source: ConfigurationSource, issues: List[ValidationIssue]) -> Dict[str, Any]:
        try:
            data = source.load()
        except ConfigFileWarning as e:
            logger.warning("Skipping configuration source %s: %s", source.describe(), e.message)
            issues.append(ValidationIssue.warning(e.file_path, e.message))
            return {}

        if data:
            logger.debug("Loaded %d keys from %s", len(data), source.describe())
        return data

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @staticmethod
    def parse_value(raw: Any) -> Any:
        return parse_value(raw)

    def get(self, key: str, fallback: Any = None) -> Any:
        """
        Get a coerced configuration value.

        Flat values win; otherwise ``key`` is looked up as a dotted path in
        the structured configuration. Returns ``fallback`` if neither
        resolves.
        """
        if key in self._values:
            return parse_value(self._values[key])

        current: Any = self._structured
        for part in key.split('.'):
            if isinstance(current, Mapping) and part in current:
                current = current[part]
            else:
                return fallback

        return fallback if current is None else current

    def set(self, key: str, value: Any) -> None:
        """
        Override a single value.

        Dotted keys are written into the structured configuration, creating
        intermediate mappings as needed; other keys replace the flat value.
        """
        if key in self._values or '.' not in key:
            self._values[key] = value
            return

        parts = key.split('.')
        current = self._structured
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def _get_text(self, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """Like ``get`` but without coercion, for string-typed fields."""
        if key in self._values:
            value = self._values[key]
        else:
            value = self.get(key)
        if value is None:
            return fallback
        return value if isinstance(value, str) else str(value)

    @property
    def environment(self) -> str:
        return self._environment

    def is_production(self) -> bool:
        return self._environment == 'production'

    def is_development(self) -> bool:
        return self._environment == 'development'

    def is_testing(self) -> bool:
        return self._environment == 'test'

    @property
    def issues(self) -> List[ValidationIssue]:
        return self._source_issues + self._validation_issues

    @property
    def raw_values(self) -> Dict[str, Any]:
        """Merged flat values before coercion."""
        return dict(self._values)

    @property
    def resolved(self) -> ResolvedConfig:
        """Immutable snapshot of the current state."""
        return ResolvedConfig(
            environment=self._environment,
            values={key: parse_value(value) for key, value in self._values.items()},
            structured=copy.deepcopy(self._structured),
            issues=self.issues
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @staticmethod
    def _build_view(model: Type[ViewT], name: str, data: Dict[str, Any]) -> ViewT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid {name} configuration: {e}", key=name) from e

    def server_config(self) -> ServerConfig:
        return self._build_view(ServerConfig, 'server', {
            'port': self.get('APP_PORT', 8847),
            'host': self._get_text('APP_HOST', '0.0.0.0'),
            'cors': {
                'origin': self.get('CORS_ORIGIN', 'http://localhost:8847'),
                'credentials': True,
            },
            'jwt': {
                'secret': self._get_text('JWT_SECRET'),
                'expiresIn': self._get_text('JWT_EXPIRES_IN', '8h'),
            },
            'rateLimit': {
                'windowMs': self.get('RATE_LIMIT_WINDOW', 15 * 60 * 1000),
                'max': self.get('RATE_LIMIT_MAX', 100),
            },
            'requestTimeout': self.get('REQUEST_TIMEOUT', 30000),
            'maxRequestSize': self._get_text('MAX_REQUEST_SIZE', '10mb'),
        })

    def database_config(self) -> DatabaseConfig:
        database_url = self._get_text('DATABASE_URL')
        if database_url:
            return self._build_view(DatabaseConfig, 'database', {'connectionString': database_url})

        return self._build_view(DatabaseConfig, 'database', {
            'host': self._get_text('DB_HOST', 'localhost'),
            'port': self.get('DB_PORT', 5432),
            'database': self._get_text('DB_NAME', 'fuco_production'),
            'username': self._get_text('DB_USER', 'postgres'),
            'password': self._get_text('DB_PASSWORD', 'postgres'),
            'ssl': self.is_production(),
        })

    def logging_config(self) -> LoggingConfig:
        production = self.is_production()
        return self._build_view(LoggingConfig, 'logging', {
            'level': self._get_text('LOG_LEVEL', 'info'),
            'file': self._get_text('LOG_FILE', 'logs/fuco.log'),
            'console': not production,
            'format': 'json' if production else 'simple',
            'maxFiles': self.get('LOG_MAX_FILES', 5),
            'maxSize': self._get_text('LOG_MAX_SIZE', '10m'),
        })

    def feature_flags(self) -> FeatureFlags:
        return self._build_view(FeatureFlags, 'features', {
            'monitoring': self.get('ENABLE_MONITORING', True),
            'reports': self.get('ENABLE_REPORTS', True),
            'qualityModule': self.get('ENABLE_QUALITY_MODULE', True),
            'equipmentModule': self.get('ENABLE_EQUIPMENT_MODULE', True),
            'materialsModule': self.get('ENABLE_MATERIALS_MODULE', False),
            'debugging': not self.is_production(),
            'analytics': self.get('ENABLE_ANALYTICS', False),
        })

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _secret_values(self) -> List[str]:
        found = []
        for key in ('JWT_SECRET', 'DB_PASSWORD'):
            if is_present(self._values, key):
                found.append(str(self._values[key]))

        database_url = self._get_text('DATABASE_URL')
        if database_url:
            try:
                password = urlsplit(database_url).password
            except ValueError:
                password = None
            if password:
                found.append(password)

        # Longest first so overlapping secrets are fully masked
        return sorted(set(found), key=len, reverse=True)

    def export_config(self) -> Dict[str, Any]:
        """
        Full snapshot of every derived view with secrets redacted.

        For diagnostics only, never for opening connections.
        """
        server = self.server_config().model_dump(by_alias=True)
        database = self.database_config().model_dump(by_alias=True, exclude_none=True)

        server['jwt']['secret'] = REDACTED
        if 'password' in database:
            database['password'] = REDACTED

        snapshot = {
            'environment': self._environment,
            'server': server,
            'database': database,
            'logging': self.logging_config().model_dump(by_alias=True),
            'features': self.feature_flags().model_dump(by_alias=True),
            'custom': copy.deepcopy(self._structured),
        }
        return _mask_secrets(snapshot, self._secret_values())

    def generate_report(self) -> str:
        """Human-readable summary of the resolved state."""
        lines = [
            'FUCO Production System - Configuration Report',
            '=' * 50,
            f"Environment: {self._environment}",
            f"Server: {self.get('APP_HOST')}:{self.get('APP_PORT')}",
            f"Monitoring: {'enabled' if self.get('ENABLE_MONITORING') else 'disabled'}",
            f"Reports: {'enabled' if self.get('ENABLE_REPORTS') else 'disabled'}",
            '',
            'Feature modules:',
        ]

        for name, enabled in self.feature_flags().model_dump(by_alias=True).items():
            lines.append(f"   [{'on ' if enabled else 'off'}] {name}")

        lines.append('')
        lines.append('Configuration files:')
        for name, path in self.well_known_files():
            lines.append(f"   [{'x' if path.is_file() else ' '}] {name}")

        warnings = self.issues
        if warnings:
            lines.append('')
            lines.append('Warnings:')
            for issue in warnings:
                lines.append(f"   - {issue.message}")

        return '\n'.join(lines)

    def validate_production_config(self) -> ProductionValidationResult:
        if not self.is_production():
            return ProductionValidationResult(valid=True)

        cors_origin = self._get_text('CORS_ORIGIN', '')
        return validate_production(
            jwt_secret=self._get_text('JWT_SECRET'),
            database_url=self._get_text('DATABASE_URL'),
            log_level=self.get('LOG_LEVEL'),
            cors_origins=[origin.strip() for origin in cors_origin.split(',') if origin.strip()]
        )


def _mask_secrets(value: Any, secret_values: List[str]) -> Any:
    if isinstance(value, dict):
        return {key: _mask_secrets(item, secret_values) for key, item in value.items()}
    if isinstance(value, list):
        return [_mask_secrets(item, secret_values) for item in value]
    if isinstance(value, str):
        for secret in secret_values:
            value = value.replace(secret, REDACTED)
        return value
    if not isinstance(value, bool) and str(value) in secret_values:
        return REDACTED
    return value
