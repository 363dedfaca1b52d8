"""CloudTrace process entrypoint and lifecycle orchestration."""
