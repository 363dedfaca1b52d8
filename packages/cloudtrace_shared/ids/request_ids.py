"""Request identifier generation and validation helpers.

Identifiers are random (version 4) UUIDs in canonical 36-character text form:
122 random bits, so collisions are improbable but not impossible. Callers
that persist identifiers under a uniqueness constraint must treat a collision
as a real, if rare, outcome.
"""

from __future__ import annotations

import uuid

REQUEST_ID_LENGTH = 36


def generate_request_id() -> str:
    """Generate a new random request identifier in canonical UUID text form."""
    return str(uuid.uuid4())


def is_request_id(value: object) -> bool:
    """Return whether ``value`` is a canonical 36-character UUID string."""
    if not isinstance(value, str) or len(value) != REQUEST_ID_LENGTH:
        return False
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return False
    return str(parsed) == value.lower()
