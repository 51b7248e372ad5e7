"""Identifier generation."""

import uuid


def generate_id() -> str:
    """Return a new opaque unique id for an account or entry."""
    return str(uuid.uuid4())
