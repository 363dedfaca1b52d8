"""Public API for shared CloudTrace configuration utilities."""

from .loader import LEGACY_ENV_KEYS, LegacyEnvSettingsSource, load_settings
from .models import (
    ComponentsSettings,
    CoreSettings,
    DEFAULT_CONFIG_PATH,
    DEFAULT_DOTENV_PATH,
    CloudTraceSettings,
    HttpSettings,
    LoggingSettings,
    PostgresSettings,
    resolve_component_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DOTENV_PATH",
    "LEGACY_ENV_KEYS",
    "CloudTraceSettings",
    "ComponentsSettings",
    "CoreSettings",
    "HttpSettings",
    "LegacyEnvSettingsSource",
    "LoggingSettings",
    "PostgresSettings",
    "load_settings",
    "resolve_component_settings",
]
