"""Shared request identifier primitives."""

from packages.cloudtrace_shared.ids.request_ids import (
    REQUEST_ID_LENGTH,
    generate_request_id,
    is_request_id,
)

__all__ = [
    "REQUEST_ID_LENGTH",
    "generate_request_id",
    "is_request_id",
]
