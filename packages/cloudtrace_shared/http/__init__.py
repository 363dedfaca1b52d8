"""Public shared HTTP API for CloudTrace packages."""

from .server import (
    INTERNAL_ERROR_BODY,
    NOT_FOUND_BODY,
    build_server,
    create_app,
    get_header,
    install_fault_barrier,
    install_not_found_handler,
)

__all__ = [
    "INTERNAL_ERROR_BODY",
    "NOT_FOUND_BODY",
    "build_server",
    "create_app",
    "get_header",
    "install_fault_barrier",
    "install_not_found_handler",
]
