"""
Configuration sources for loading configuration data.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Any, Mapping, Optional, Tuple, Union

import yaml
from dotenv.parser import parse_stream

from ..infrastructure.exceptions import ConfigFileWarning

logger = logging.getLogger(__name__)

# Default priorities, higher number = higher priority
ENVIRONMENT_PRIORITY = 700
ENV_TIER_FILE_PRIORITY = 600
ENV_LOCAL_FILE_PRIORITY = 500
ENV_BASE_FILE_PRIORITY = 400
PROJECT_CONFIG_PRIORITY = 300
TIER_CONFIG_PRIORITY = 200
DEFAULT_CONFIG_PRIORITY = 100


def parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Parse one ``KEY=VALUE`` line.

    Returns None for blank lines, comments and lines without a key.
    """
    line = line.strip()
    if not line or line.startswith('#'):
        return None

    key, sep, value = line.partition('=')
    key = key.strip()
    if not sep or not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1]
    return key, value


class ConfigurationSource(ABC):
    """Abstract base class for configuration sources."""

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """Load configuration data from the source."""
        pass

    @abstractmethod
    def get_priority(self) -> int:
        """Get the priority of this source (higher number = higher priority)."""
        pass

    def describe(self) -> str:
        """Short human-readable label used in logs and reports."""
        return type(self).__name__


class FileConfigurationSource(ConfigurationSource):
    """Base class for sources backed by a single file."""

    def __init__(self, file_path: Union[str, Path], priority: int):
        self.file_path = Path(file_path)
        self.priority = priority

    def exists(self) -> bool:
        return self.file_path.is_file()

    def get_priority(self) -> int:
        return self.priority

    def describe(self) -> str:
        return str(self.file_path)


class EnvironmentConfigurationSource(ConfigurationSource):
    """Process environment configuration source."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None, priority: int = ENVIRONMENT_PRIORITY):
        self._environ = environ
        self.priority = priority

    def load(self) -> Dict[str, Any]:
        """Take a snapshot of the environment mapping."""
        environ = os.environ if self._environ is None else self._environ
        return dict(environ)

    def get_priority(self) -> int:
        return self.priority

    def describe(self) -> str:
        return "process environment"


class DotEnvConfigurationSource(FileConfigurationSource):
    """
    ``.env``-style file source.

    Lines are ``KEY=VALUE`` split at the first ``=``; ``#`` lines are
    comments and surrounding matching quotes are stripped from values.
    Everything else is kept literally: no inline comments, no escape
    sequences and no interpolation. Within one file the first non-empty
    value of a key wins. A missing file yields an empty mapping.
    """

    def load(self) -> Dict[str, Any]:
        if not self.exists():
            return {}

        values: Dict[str, str] = {}
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                for binding in parse_stream(f):
                    if binding.error:
                        logger.debug("Reading statement literally in %s: %r",
                                     self.file_path, binding.original.string)
                    for line in binding.original.string.splitlines():
                        entry = parse_env_line(line)
                        if entry and not values.get(entry[0]):
                            values[entry[0]] = entry[1]
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigFileWarning(
                f"Unable to read environment file: {self.file_path}: {e}",
                str(self.file_path),
                cause=e
            ) from e

        return values


class StructuredFileConfigurationSource(FileConfigurationSource):
    """JSON or YAML configuration file source; the root must be a mapping."""

    def load(self) -> Dict[str, Any]:
        if not self.exists():
            return {}

        suffix = self.file_path.suffix.lower()
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                if suffix in ('.yaml', '.yml'):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigFileWarning(
                f"Unable to parse configuration file: {self.file_path}: {e}",
                str(self.file_path),
                cause=e
            ) from e
        except OSError as e:
            raise ConfigFileWarning(
                f"Unable to read configuration file: {self.file_path}: {e}",
                str(self.file_path),
                cause=e
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigFileWarning(
                f"Configuration file root must be a mapping, got {type(data).__name__}: {self.file_path}",
                str(self.file_path)
            )
        return data
