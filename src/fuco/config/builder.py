"""
Configuration builder for creating ConfigResolver instances.
"""

from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence, Union

from .resolver import ConfigResolver, generate_secret
from .sources import ConfigurationSource, StructuredFileConfigurationSource, PROJECT_CONFIG_PRIORITY
from .validation import OPTIONAL_KEYS, REQUIRED_KEYS


class ConfigurationBuilder:
    """
    Builder for creating ConfigResolver instances.

    The fixed source precedence cannot be changed; the builder only selects
    the project directory, the environment mapping, the key sets and any
    additional structured files.
    """

    def __init__(self):
        self._base_dir: Optional[Path] = None
        self._environ: Optional[Mapping[str, str]] = None
        self._required_keys: List[str] = list(REQUIRED_KEYS)
        self._optional_keys: List[str] = list(OPTIONAL_KEYS)
        self._sources: List[ConfigurationSource] = []
        self._secret_factory: Callable[[], str] = generate_secret

    def with_base_dir(self, path: Union[str, Path]) -> 'ConfigurationBuilder':
        """Directory the ``.env`` and JSON files are resolved against."""
        self._base_dir = Path(path)
        return self

    def with_environ(self, environ: Mapping[str, str]) -> 'ConfigurationBuilder':
        """Use ``environ`` instead of ``os.environ`` as the process environment."""
        self._environ = environ
        return self

    def require(self, *keys: str) -> 'ConfigurationBuilder':
        """Add keys to the required set."""
        for key in keys:
            if key not in self._required_keys:
                self._required_keys.append(key)
        return self

    def with_required_keys(self, keys: Sequence[str]) -> 'ConfigurationBuilder':
        """Replace the required key set."""
        self._required_keys = list(keys)
        return self

    def with_optional_keys(self, keys: Sequence[str]) -> 'ConfigurationBuilder':
        """Replace the recommended key set."""
        self._optional_keys = list(keys)
        return self

    def add_structured_source(
        self,
        path: Union[str, Path],
        priority: int = PROJECT_CONFIG_PRIORITY + 50
    ) -> 'ConfigurationBuilder':
        """
        Add a JSON or YAML file to the structured layer.

        Args:
            path: Path to the configuration file
            priority: Priority of this source (higher = more important)
        """
        self._sources.append(StructuredFileConfigurationSource(path, priority))
        return self

    def add_source(self, source: ConfigurationSource) -> 'ConfigurationBuilder':
        """Add a custom configuration source."""
        self._sources.append(source)
        return self

    def with_secret_factory(self, factory: Callable[[], str]) -> 'ConfigurationBuilder':
        """Factory used for the generated session secret."""
        self._secret_factory = factory
        return self

    def build(self) -> ConfigResolver:
        """
        Build and load the resolver.

        Raises:
            MissingConfigError: If a required key is absent
            InvalidConfigError: If a value violates a domain constraint
        """
        return ConfigResolver(
            base_dir=self._base_dir,
            environ=self._environ,
            required_keys=self._required_keys,
            optional_keys=self._optional_keys,
            extra_sources=self._sources.copy(),
            secret_factory=self._secret_factory
        )
