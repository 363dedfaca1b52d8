"""Settings loading with deterministic precedence.

The cascade is always:
1) Explicit overrides passed to ``load_settings``
2) ``CLOUDTRACE_``-prefixed environment variables (``__`` nests keys)
3) Deployment environment names (``PORT``, ``DB_HOST`` ...), also read from
   a local ``.env`` file
4) ``~/.config/cloudtrace/cloudtrace.yaml``
5) Built-in model defaults

Example: ``CLOUDTRACE_POSTGRES__POOL_SIZE=20`` -> ``postgres.pool_size = 20``
and ``DB_HOST=db.internal`` -> ``postgres.host = "db.internal"``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .models import DEFAULT_CONFIG_PATH, DEFAULT_DOTENV_PATH, CloudTraceSettings

# Environment names written by the provisioning and start scripts.
LEGACY_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "PORT": ("http", "port"),
    "DB_HOST": ("postgres", "host"),
    "DB_PORT": ("postgres", "port"),
    "DB_USER": ("postgres", "user"),
    "DB_PASSWORD": ("postgres", "password"),
    "DB_NAME": ("postgres", "database"),
}


class LegacyEnvSettingsSource(PydanticBaseSettingsSource):
    """Map flat deployment environment names into nested settings."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        *,
        dotenv_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings_cls)
        self._dotenv_path = dotenv_path
        self._environ = environ

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Field-level lookup is unused; values are produced in ``__call__``."""
        del field
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        env = self._resolved_environ()
        output: dict[str, Any] = {}
        for env_name, path in LEGACY_ENV_KEYS.items():
            raw_value = env.get(env_name)
            if raw_value is None or raw_value.strip() == "":
                continue
            _set_nested(output, path, raw_value.strip())
        return output

    def _resolved_environ(self) -> dict[str, str]:
        """Merge ``.env`` values under the live process environment."""
        merged: dict[str, str] = {}
        if self._dotenv_path is not None and self._dotenv_path.is_file():
            merged.update(
                {
                    key: value
                    for key, value in dotenv_values(self._dotenv_path).items()
                    if value is not None
                }
            )
        merged.update(os.environ if self._environ is None else self._environ)
        return merged


def load_settings(
    *,
    config_path: str | Path | None = None,
    dotenv_path: str | Path | None = None,
    **overrides: Any,
) -> CloudTraceSettings:
    """Load settings by applying the standard CloudTrace precedence cascade."""
    previous_config = CloudTraceSettings._config_path
    previous_dotenv = CloudTraceSettings._dotenv_path
    CloudTraceSettings._config_path = (
        Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    )
    CloudTraceSettings._dotenv_path = (
        Path(dotenv_path) if dotenv_path is not None else DEFAULT_DOTENV_PATH
    )
    try:
        return CloudTraceSettings(**overrides)
    finally:
        CloudTraceSettings._config_path = previous_config
        CloudTraceSettings._dotenv_path = previous_dotenv


def _set_nested(target: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    """Set a nested mapping value by path, creating intermediate dicts."""
    cursor: dict[str, Any] = target
    for segment in path[:-1]:
        child = cursor.get(segment)
        if not isinstance(child, dict):
            child = {}
            cursor[segment] = child
        cursor = child
    cursor[path[-1]] = value
