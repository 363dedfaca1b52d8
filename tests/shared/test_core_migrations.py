"""Tests for startup migration discovery and execution behavior."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic.config import Config

from packages.cloudtrace_core.migrations import (
    MigrationExecutionError,
    discover_service_migration_configs,
    run_startup_migrations,
)
from packages.cloudtrace_shared.config import CloudTraceSettings


def _ini(root: Path, system: str, service: str) -> Path:
    path = root / "services" / system / service / "migrations" / "alembic.ini"
    path.parent.mkdir(parents=True)
    path.write_text("[alembic]\n", encoding="utf-8")
    return path


def test_discover_service_migration_configs_is_sorted(tmp_path: Path) -> None:
    """Discovery should find every service alembic config in stable order."""
    second = _ini(tmp_path, "state", "zeta")
    first = _ini(tmp_path, "state", "alpha")
    (tmp_path / "services" / "state" / "no_migrations").mkdir(parents=True)

    assert discover_service_migration_configs(repo_root=tmp_path) == (first, second)


def test_repository_ships_request_log_migrations() -> None:
    """The default root should find the request log alembic config."""
    configs = discover_service_migration_configs()

    assert any(
        path.parts[-4:-1] == ("state", "request_log", "migrations") for path in configs
    )


def test_run_startup_migrations_upgrades_each_config_with_settings_url(
    tmp_path: Path,
) -> None:
    """Each config should be upgraded to head against the configured database."""
    config_path = _ini(tmp_path, "state", "request_log")
    upgrades: list[tuple[Config, str]] = []
    settings = CloudTraceSettings(
        postgres={"host": "db", "user": "u", "password": "p%w", "database": "logs"}
    )

    result = run_startup_migrations(
        settings=settings,
        repo_root=tmp_path,
        upgrade_fn=lambda config, revision: upgrades.append((config, revision)),
    )

    assert result.executed_alembic_configs == (str(config_path),)
    ((config, revision),) = upgrades
    assert revision == "head"
    assert config.get_main_option("sqlalchemy.url") == (
        "postgresql+asyncpg://u:p%25w@db:5432/logs"
    )


def test_run_startup_migrations_wraps_failures(tmp_path: Path) -> None:
    """Alembic failures should surface as MigrationExecutionError."""
    _ini(tmp_path, "state", "request_log")

    def _fail(config: Config, revision: str) -> None:
        del config, revision
        raise RuntimeError("relation already exists")

    with pytest.raises(MigrationExecutionError, match="startup migration failed"):
        run_startup_migrations(
            settings=CloudTraceSettings(),
            repo_root=tmp_path,
            upgrade_fn=_fail,
        )
