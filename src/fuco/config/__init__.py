"""
Configuration Management System

Layered configuration resolution over the process environment, ``.env``
files and JSON config files, with type coercion, validation, defaults and
derived views for server, database, logging and feature switches.
"""

from .coercion import (
    ValueKind,
    ConfigValue,
    coerce,
    parse_value,
    parse_size
)

from .models import (
    CorsSettings,
    JwtSettings,
    RateLimitSettings,
    ServerConfig,
    DatabaseConfig,
    LoggingConfig,
    FeatureFlags,
    ResolvedConfig
)

from .sources import (
    ConfigurationSource,
    FileConfigurationSource,
    EnvironmentConfigurationSource,
    DotEnvConfigurationSource,
    StructuredFileConfigurationSource
)

from .validation import (
    IssueSeverity,
    ValidationIssue,
    ProductionConfigIssue,
    ProductionValidationResult,
    ConfigurationValidator,
    REQUIRED_KEYS,
    OPTIONAL_KEYS,
    PLACEHOLDER_JWT_SECRET
)

from .resolver import ConfigResolver, DEFAULT_VALUES, REDACTED, generate_secret

from .builder import ConfigurationBuilder

from .utils import (
    load_configuration,
    create_configuration_builder,
    bootstrap_environment
)

__all__ = [
    # Coercion
    'ValueKind',
    'ConfigValue',
    'coerce',
    'parse_value',
    'parse_size',

    # Models
    'CorsSettings',
    'JwtSettings',
    'RateLimitSettings',
    'ServerConfig',
    'DatabaseConfig',
    'LoggingConfig',
    'FeatureFlags',
    'ResolvedConfig',

    # Sources
    'ConfigurationSource',
    'FileConfigurationSource',
    'EnvironmentConfigurationSource',
    'DotEnvConfigurationSource',
    'StructuredFileConfigurationSource',

    # Validation
    'IssueSeverity',
    'ValidationIssue',
    'ProductionConfigIssue',
    'ProductionValidationResult',
    'ConfigurationValidator',
    'REQUIRED_KEYS',
    'OPTIONAL_KEYS',
    'PLACEHOLDER_JWT_SECRET',

    # Core
    'ConfigResolver',
    'DEFAULT_VALUES',
    'REDACTED',
    'generate_secret',

    # Builder
    'ConfigurationBuilder',

    # Utilities
    'load_configuration',
    'create_configuration_builder',
    'bootstrap_environment'
]
