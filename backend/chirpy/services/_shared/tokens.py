"""Helpers for opaque refresh token values."""

from __future__ import annotations

import hashlib
import secrets

# 32 random bytes -> 64 hex characters
REFRESH_TOKEN_BYTES = 32


def new_refresh_token_value() -> str:
    """Generate a new refresh token value from the OS CSPRNG."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def token_ref(value: str) -> str:
    """
    Return a short, stable reference to a token for logs and error keys.

    The raw value is a bearer credential and must never be logged.
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]
