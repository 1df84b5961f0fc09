"""URL-safe base64 without padding, as used by the MEGA protocol."""

from __future__ import annotations

import base64
import binascii

from .errors import Base64Error


def base64url_encode(data: bytes) -> str:
    """Encode bytes to URL-safe base64 with the trailing padding removed."""
    return base64.urlsafe_b64encode(bytes(data)).decode("ascii").rstrip("=")


def base64url_decode(s: str) -> bytes:
    """Decode URL-safe base64, adding back any padding that was stripped.

    Raises Base64Error if the input is not valid base64.
    """
    standard = s.replace("-", "+").replace("_", "/")
    padded = standard + "=" * (-len(standard) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise Base64Error(str(exc)) from exc