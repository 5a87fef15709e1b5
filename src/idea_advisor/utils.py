"""
Utility helpers for the Idea Advisor service.

uuid7() wraps fastuuid.uuid7() to return a stdlib uuid.UUID instance.
fastuuid.UUID is a Rust-backed type that is NOT isinstance-compatible with
uuid.UUID, so we roundtrip through the string representation.
"""

from datetime import datetime, timezone
from uuid import UUID

import fastuuid


def uuid7() -> UUID:
    """Generate a UUIDv7 (time-sortable) as a stdlib uuid.UUID."""
    return UUID(str(fastuuid.uuid7()))


def new_id(prefix: str) -> str:
    """Generate a prefixed, time-sortable identifier such as ``PRJ-0192...``."""
    return f'{prefix}-{uuid7()}'


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)
