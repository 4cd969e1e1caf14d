"""
Infrastructure Layer - Cross-cutting concerns

Exception hierarchy shared by the configuration core and its consumers.
"""

from .exceptions import (
    FucoException,
    ConfigurationError,
    MissingConfigError,
    InvalidConfigError,
    ConfigFileWarning
)

__all__ = [
    "FucoException",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "ConfigFileWarning",
]
