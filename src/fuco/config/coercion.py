"""
Type coercion for raw configuration values.

Environment variables and ``.env`` entries always arrive as strings. This
module turns them into tagged values without touching any source or file.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

_INTEGER_PATTERN = re.compile(r"-?[0-9]+")
_FLOAT_PATTERN = re.compile(r"-?[0-9]*\.[0-9]+")
_SIZE_PATTERN = re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*([kmg]?)b?", re.IGNORECASE)

_SIZE_MULTIPLIERS = {
    "": 1,
    "k": 1024,
    "m": 1024 ** 2,
    "g": 1024 ** 3,
}


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


class ValueKind(Enum):
    """Kinds a coerced configuration value can take."""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    JSON = "json"


@dataclass(frozen=True)
class ConfigValue:
    """A configuration value tagged with the kind it was coerced to."""
    kind: ValueKind
    value: Any


def coerce(raw: str) -> ConfigValue:
    """
    Coerce a raw string into a tagged value.

    Rules are applied in order: boolean literal, integer, decimal, JSON
    object/array, plain string. A string that looks like JSON but does not
    parse stays a string.
    """
    lowered = raw.lower()
    if lowered == "true":
        return ConfigValue(ValueKind.BOOLEAN, True)
    if lowered == "false":
        return ConfigValue(ValueKind.BOOLEAN, False)

    if _INTEGER_PATTERN.fullmatch(raw):
        return ConfigValue(ValueKind.INTEGER, int(raw))
    if _FLOAT_PATTERN.fullmatch(raw):
        return ConfigValue(ValueKind.FLOAT, float(raw))

    if raw.startswith(("{", "[")):
        try:
            return ConfigValue(ValueKind.JSON, json.loads(raw, parse_constant=_reject_constant))
        except ValueError:
            pass

    return ConfigValue(ValueKind.STRING, raw)


def parse_value(raw: Any) -> Any:
    """Coerce ``raw`` if it is a string; any other value is returned as is."""
    if not isinstance(raw, str):
        return raw
    return coerce(raw).value


def parse_size(size: Union[str, int, float]) -> int:
    """
    Convert a human size such as ``10mb``, ``10m`` or ``512k`` to bytes.

    Raises:
        ValueError: If the string is not a recognised size.
    """
    if isinstance(size, bool):
        raise ValueError(f"Invalid size: {size!r}")
    if isinstance(size, (int, float)):
        return int(size)

    match = _SIZE_PATTERN.fullmatch(size.strip())
    if not match:
        raise ValueError(f"Invalid size: {size!r}")

    number, unit = match.groups()
    return int(float(number) * _SIZE_MULTIPLIERS[unit.lower()])
