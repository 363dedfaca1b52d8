"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.cloudtrace_shared.config import LEGACY_ENV_KEYS, load_settings
from services.state.request_log.config import resolve_request_log_settings

_LEGACY_AND_PREFIXED = (
    *LEGACY_ENV_KEYS,
    "CLOUDTRACE_HTTP__PORT",
    "CLOUDTRACE_LOGGING__LEVEL",
    "CLOUDTRACE_POSTGRES__HOST",
    "CLOUDTRACE_POSTGRES__POOL_SIZE",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of precedence assertions."""
    for name in _LEGACY_AND_PREFIXED:
        monkeypatch.delenv(name, raising=False)


def _yaml(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / "cloudtrace.yaml"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to model defaults when env and YAML are absent."""
    settings = load_settings(
        config_path=tmp_path / "missing.yaml",
        dotenv_path=tmp_path / "missing.env",
    )

    assert settings.http.port == 3000
    assert settings.http.host == "0.0.0.0"
    assert settings.postgres.host == "localhost"
    assert settings.postgres.pool_size == 10
    assert settings.postgres.max_overflow == 0
    assert settings.core.run_migrations_on_startup is False


def test_load_settings_precedence_init_over_env_over_legacy_over_yaml(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Each source should only fill what higher-precedence sources leave unset."""
    config_file = _yaml(
        tmp_path,
        "logging:",
        "  level: WARNING",
        "http:",
        "  port: 7000",
        "postgres:",
        "  host: yaml-db",
        "  database: yaml_logs",
        "  pool_size: 4",
    )
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("DB_HOST", "legacy-db")
    monkeypatch.setenv("CLOUDTRACE_POSTGRES__HOST", "prefixed-db")
    monkeypatch.setenv("CLOUDTRACE_LOGGING__LEVEL", "ERROR")

    settings = load_settings(
        config_path=config_file,
        dotenv_path=tmp_path / "missing.env",
        logging={"level": "DEBUG"},
    )

    assert settings.logging.level == "DEBUG"
    assert settings.postgres.host == "prefixed-db"
    assert settings.http.port == 8080
    assert settings.postgres.database == "yaml_logs"
    assert settings.postgres.pool_size == 4


def test_load_settings_reads_deployment_names_from_dotenv(tmp_path: Path) -> None:
    """The provisioning scripts' ``.env`` file should configure the datastore."""
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "\n".join(
            [
                "DB_HOST=10.0.1.15",
                "DB_PORT=6432",
                "DB_USER=trace_writer",
                "DB_PASSWORD=s3cret",
                "DB_NAME=cloudtrace_prod",
                "PORT=3100",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(config_path=tmp_path / "missing.yaml", dotenv_path=dotenv)

    assert settings.postgres.host == "10.0.1.15"
    assert settings.postgres.port == 6432
    assert settings.postgres.user == "trace_writer"
    assert settings.postgres.password == "s3cret"
    assert settings.postgres.database == "cloudtrace_prod"
    assert settings.http.port == 3100


def test_process_environment_overrides_dotenv_values(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Live environment names should win over the ``.env`` file."""
    dotenv = tmp_path / ".env"
    dotenv.write_text("DB_HOST=from-file\n", encoding="utf-8")
    monkeypatch.setenv("DB_HOST", "from-env")

    settings = load_settings(config_path=tmp_path / "missing.yaml", dotenv_path=dotenv)

    assert settings.postgres.host == "from-env"


def test_prefixed_nested_env_sets_component_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """``__`` should nest into the components subtree."""
    monkeypatch.setenv("CLOUDTRACE_COMPONENTS__REQUEST_LOG__MAX_ATTEMPTS", "5")

    settings = load_settings(
        config_path=tmp_path / "missing.yaml",
        dotenv_path=tmp_path / "missing.env",
    )

    assert resolve_request_log_settings(settings).max_attempts == 5


def test_invalid_values_fail_fast(tmp_path: Path) -> None:
    """Out-of-range values should raise a validation error at load time."""
    with pytest.raises(ValidationError):
        load_settings(
            config_path=tmp_path / "missing.yaml",
            dotenv_path=tmp_path / "missing.env",
            http={"port": 70000},
        )
