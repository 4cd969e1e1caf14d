"""
Utility functions for common configuration patterns.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Union

from .builder import ConfigurationBuilder
from .resolver import ConfigResolver

logger = logging.getLogger(__name__)


def load_configuration(base_dir: Optional[Union[str, Path]] = None) -> ConfigResolver:
    """
    Load configuration for a project directory using the process environment.

    Args:
        base_dir: Project directory, defaults to the working directory

    Returns:
        Loaded ConfigResolver
    """
    builder = ConfigurationBuilder()
    if base_dir is not None:
        builder.with_base_dir(base_dir)
    return builder.build()


def create_configuration_builder() -> ConfigurationBuilder:
    """Create a new configuration builder."""
    return ConfigurationBuilder()


def bootstrap_environment(
    resolver: ConfigResolver,
    environ: Optional[MutableMapping[str, str]] = None
) -> Dict[str, str]:
    """
    Export resolved values that are missing from the process environment.

    This is the only place the configuration core writes to ``os.environ``.
    Call it once at process start for consumers that still read the
    environment directly. Existing variables are never overwritten.

    Returns:
        The variables that were set
    """
    target = os.environ if environ is None else environ
    exported = {}

    for key, value in resolver.raw_values.items():
        if target.get(key):
            continue
        if isinstance(value, bool):
            text = 'true' if value else 'false'
        elif isinstance(value, (dict, list)):
            text = json.dumps(value)
        else:
            text = str(value)
        target[key] = text
        exported[key] = text

    logger.debug("Exported %d configuration keys to the environment", len(exported))
    return exported
