"""
FUCO - Production management system configuration core

Resolves layered configuration into validated, typed views for the
backend's server, database and logging setup.
"""

__version__ = "1.0.0"
__author__ = "FUCO Development Team"

from .config import ConfigResolver, ConfigurationBuilder, load_configuration
from .infrastructure.exceptions import (
    FucoException,
    ConfigurationError,
    MissingConfigError,
    InvalidConfigError,
    ConfigFileWarning
)

__all__ = [
    "ConfigResolver",
    "ConfigurationBuilder",
    "load_configuration",
    "FucoException",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "ConfigFileWarning",
]
