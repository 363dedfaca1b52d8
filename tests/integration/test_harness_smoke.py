"""Smoke tests for the integration harness fixture layer."""

from __future__ import annotations

from tests.integration.helpers import real_provider_tests_enabled


def test_real_provider_flag_defaults_disabled(monkeypatch) -> None:
    """Real-provider integration mode should be opt-in by environment flag."""
    monkeypatch.delenv("CLOUDTRACE_RUN_INTEGRATION_REAL", raising=False)
    assert real_provider_tests_enabled() is False

    monkeypatch.setenv("CLOUDTRACE_RUN_INTEGRATION_REAL", "1")
    assert real_provider_tests_enabled() is True
