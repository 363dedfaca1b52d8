"""Startup and command-line Alembic migration orchestration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config

from packages.cloudtrace_shared.config import CloudTraceSettings, load_settings
from packages.cloudtrace_shared.logging import configure_logging, get_logger
from resources.substrates.postgres.config import (
    resolve_postgres_settings,
    resolve_postgres_url,
)

_LOGGER = get_logger(__name__)
_REPO_ROOT = Path(__file__).resolve().parents[2]


class MigrationExecutionError(RuntimeError):
    """Raised when startup migration execution fails."""


@dataclass(frozen=True, slots=True)
class MigrationRunResult:
    """Summary of one migration pass."""

    executed_alembic_configs: tuple[str, ...]


def discover_service_migration_configs(
    *,
    repo_root: Path | None = None,
) -> tuple[Path, ...]:
    """Discover ``services/<system>/<service>/migrations/alembic.ini`` files."""
    root = (repo_root or _REPO_ROOT).resolve()
    return tuple(sorted(root.glob("services/*/*/migrations/alembic.ini")))


def run_startup_migrations(
    *,
    settings: CloudTraceSettings,
    repo_root: Path | None = None,
    upgrade_fn: Callable[[Config, str], None] = command.upgrade,
) -> MigrationRunResult:
    """Run Alembic upgrades to ``head`` for every service owning migrations."""
    url = resolve_postgres_url(resolve_postgres_settings(settings))
    configs = discover_service_migration_configs(repo_root=repo_root)

    executed: list[str] = []
    for config_path in configs:
        alembic_config = Config(str(config_path))
        alembic_config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
        try:
            upgrade_fn(alembic_config, "head")
        except Exception as exc:
            raise MigrationExecutionError(
                f"startup migration failed for config '{config_path}'"
            ) from exc
        executed.append(str(config_path))
        _LOGGER.info("migrations applied", extra={"alembic_config": str(config_path)})

    return MigrationRunResult(executed_alembic_configs=tuple(executed))


def main() -> None:
    """Apply all pending migrations and exit."""
    settings = load_settings()
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )
    result = run_startup_migrations(settings=settings)
    _LOGGER.info(
        "migration run completed",
        extra={"config_count": len(result.executed_alembic_configs)},
    )


if __name__ == "__main__":
    main()
