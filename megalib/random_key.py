"""Random key generation."""

from __future__ import annotations

import secrets

KEY_SIZE = 16


def make_random_key() -> bytes:
    """Return a fresh random 16-byte AES-128 key from a secure source."""
    return secrets.token_bytes(KEY_SIZE)