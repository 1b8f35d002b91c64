"""Identifier generation."""

from uuid import uuid4


def new_id() -> str:
    """Return a new random UUID v4 string."""
    return str(uuid4())
