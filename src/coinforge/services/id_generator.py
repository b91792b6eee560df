"""Prefixed ID generation utility."""

import secrets
import uuid


def generate_id(prefix: str) -> str:
    """Generate a prefixed unique ID.

    Args:
        prefix: The prefix (e.g., "acct_", "file_").

    Returns:
        A string like "acct_a1b2c3d4e5f6".
    """
    short_uuid = uuid.uuid4().hex[:16]
    return f"{prefix}{short_uuid}"


def generate_token(prefix: str = "") -> str:
    """Generate an unguessable identifier for ids that double as bearer capabilities."""
    return f"{prefix}{secrets.token_urlsafe(24)}"
