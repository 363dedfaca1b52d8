"""Shared fixtures for integration-oriented test modules."""

from __future__ import annotations

import pytest

from packages.cloudtrace_core.migrations import run_startup_migrations
from packages.cloudtrace_shared.config import CloudTraceSettings, load_settings
from tests.integration.helpers import real_provider_tests_enabled


@pytest.fixture(scope="session")
def env_settings() -> CloudTraceSettings:
    """Return loaded settings snapshot for fixture consumers."""
    return load_settings()


@pytest.fixture(scope="session")
def migrated_settings(env_settings: CloudTraceSettings) -> CloudTraceSettings:
    """Apply migrations against the configured database or skip."""
    if not real_provider_tests_enabled():
        pytest.skip("real-provider integration tests disabled")
    try:
        run_startup_migrations(settings=env_settings)
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"postgres unavailable for integration tests: {exc}")
    return env_settings
