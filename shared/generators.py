"""
Random token and name generators — pure, side-effect-free functions.

Everything here draws from the ``secrets`` module.
"""

from __future__ import annotations

import secrets

MIN_TOKEN_BYTES = 32


def generate_secure_token(length: int = MIN_TOKEN_BYTES) -> str:
    """Generate a cryptographically secure URL-safe random token.

    Args:
        length: Number of random bytes before base64 encoding (default 32,
            which is also the floor — shorter requests are raised to it).

    Returns:
        URL-safe base64-encoded token string.
    """
    return secrets.token_urlsafe(max(length, MIN_TOKEN_BYTES))


def generate_username_suffix(length: int = 4) -> str:
    """Return *length* random lowercase hex characters."""
    return secrets.token_hex((length + 1) // 2)[:length]
