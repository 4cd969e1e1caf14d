"""
Configuration data models with validation.

Derived views are frozen pydantic models. Field aliases carry the camelCase
names used by the exported snapshot.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .coercion import parse_size


class _View(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CorsSettings(_View):
    origin: List[str] = Field(default_factory=lambda: ["http://localhost:8847"])
    credentials: bool = True

    @field_validator('origin', mode='before')
    @classmethod
    def split_origins(cls, v):
        """Accept a comma-separated origin string."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(',') if item.strip()]
        return v


class JwtSettings(_View):
    secret: Optional[str] = None
    expires_in: str = Field(default="8h", alias="expiresIn")


class RateLimitSettings(_View):
    window_ms: int = Field(default=900000, ge=0, alias="windowMs")
    max: int = Field(default=100, ge=0)


class ServerConfig(_View):
    """HTTP server settings."""
    port: int = Field(default=8847, ge=1, le=65535)
    host: str = "0.0.0.0"
    cors: CorsSettings = Field(default_factory=CorsSettings)
    jwt: JwtSettings = Field(default_factory=JwtSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings, alias="rateLimit")
    request_timeout: int = Field(default=30000, ge=0, alias="requestTimeout")
    max_request_size: str = Field(default="10mb", alias="maxRequestSize")

    @field_validator('max_request_size', mode='before')
    @classmethod
    def stringify_size(cls, v):
        return str(v)

    @property
    def max_request_bytes(self) -> int:
        return parse_size(self.max_request_size)


class DatabaseConfig(_View):
    """
    Database connection settings.

    Either ``connection_string`` is set, or the discrete host/port/name
    fields are. Unused fields stay ``None`` and are left out of dumps made
    with ``exclude_none=True``.
    """
    connection_string: Optional[str] = Field(default=None, alias="connectionString")
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    ssl: Optional[bool] = None

    @property
    def uses_connection_string(self) -> bool:
        return self.connection_string is not None


class LoggingConfig(_View):
    """Logging settings consumed by the logging setup."""
    level: str = "info"
    file: str = "logs/fuco.log"
    console: bool = True
    format: str = Field(default="simple", pattern="^(simple|json)$")
    max_files: int = Field(default=5, ge=1, alias="maxFiles")
    max_size: str = Field(default="10m", alias="maxSize")

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        return str(v).lower()

    @field_validator('max_size', mode='before')
    @classmethod
    def stringify_size(cls, v):
        return str(v)


class FeatureFlags(_View):
    monitoring: bool = True
    reports: bool = True
    quality_module: bool = Field(default=True, alias="qualityModule")
    equipment_module: bool = Field(default=True, alias="equipmentModule")
    materials_module: bool = Field(default=False, alias="materialsModule")
    debugging: bool = False
    analytics: bool = False


@dataclass(frozen=True)
class ResolvedConfig:
    """
    Immutable snapshot of a resolution run.

    ``values`` maps flat keys to coerced values, ``structured`` holds the
    merged JSON configuration and ``issues`` every recorded validation issue.
    """
    environment: str
    values: Mapping[str, Any]
    structured: Mapping[str, Any]
    issues: Tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))
        object.__setattr__(self, 'structured', MappingProxyType(dict(self.structured)))
        object.__setattr__(self, 'issues', tuple(self.issues))

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.values)
