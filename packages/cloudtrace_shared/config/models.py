"""Typed configuration models for CloudTrace runtime settings."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "cloudtrace" / "cloudtrace.yaml"
DEFAULT_DOTENV_PATH = Path(".env")

_SSL_MODES = frozenset(
    {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}
)


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "cloudtrace"
    environment: str = "dev"


class HttpSettings(BaseModel):
    """Listener settings for the HTTP surface."""

    host: str = "0.0.0.0"
    port: int = Field(default=3000, gt=0, lt=65536)
    graceful_shutdown_timeout_seconds: float = Field(default=30.0, gt=0)


class PostgresSettings(BaseModel):
    """Connection and pool settings for the request-log datastore.

    ``url`` wins when set; otherwise the SQLAlchemy URL is assembled from the
    split host/port/credential fields.
    """

    url: str = ""
    host: str = "localhost"
    port: int = Field(default=5432, gt=0, lt=65536)
    user: str = "cloudtrace"
    password: str = "password"
    database: str = "cloudtrace"
    sslmode: str = "prefer"
    pool_size: int = Field(default=10, gt=0)
    max_overflow: int = Field(default=0, ge=0)
    pool_timeout_seconds: float = Field(default=60.0, gt=0)
    pool_recycle_seconds: float = Field(default=30.0, gt=0)
    pool_pre_ping: bool = True
    statement_timeout_seconds: float = Field(default=60.0, gt=0)
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    health_timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("sslmode")
    @classmethod
    def _validate_sslmode(cls, value: str) -> str:
        """Restrict sslmode to the libpq-compatible vocabulary."""
        normalized = value.strip().lower()
        if normalized not in _SSL_MODES:
            raise ValueError(
                "sslmode must be one of: disable, allow, prefer, require, "
                "verify-ca, verify-full"
            )
        return normalized

    @field_validator("host", "database", "user")
    @classmethod
    def _require_non_blank(cls, value: str) -> str:
        """Reject blank connection identity fields."""
        normalized = value.strip()
        if normalized == "":
            raise ValueError("value is required")
        return normalized


class CoreSettings(BaseModel):
    """Process lifecycle settings."""

    run_migrations_on_startup: bool = False


class ComponentsSettings(BaseModel):
    """Component-local settings keyed by component name."""

    model_config = ConfigDict(extra="allow")


class CloudTraceSettings(BaseSettings):
    """Root runtime settings resolved from init/env/dotenv/yaml/defaults."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDTRACE_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    core: CoreSettings = Field(default_factory=CoreSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    _config_path: ClassVar[Path] = DEFAULT_CONFIG_PATH
    _dotenv_path: ClassVar[Path] = DEFAULT_DOTENV_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > deployment env names > yaml."""
        from .loader import LegacyEnvSettingsSource

        del dotenv_settings, file_secret_settings
        return (
            init_settings,
            env_settings,
            LegacyEnvSettingsSource(settings_cls, dotenv_path=cls._dotenv_path),
            YamlConfigSettingsSource(
                settings_cls,
                yaml_file=cls._config_path,
                yaml_file_encoding="utf-8",
            ),
        )


TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


def resolve_component_settings(
    *,
    settings: CloudTraceSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Resolve one component settings object from ``components.<id>``."""
    raw_components = settings.components.model_dump(mode="python")
    resolved = raw_components.get(component_id, {})
    if resolved is None:
        resolved = {}
    if not isinstance(resolved, dict):
        raise TypeError(f"components.{component_id} must resolve to an object mapping")
    return model.model_validate(resolved)
