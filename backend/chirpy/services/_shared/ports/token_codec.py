from __future__ import annotations

from datetime import timedelta
from typing import Protocol


class AccessTokenCodec(Protocol):
    """Port for minting and verifying signed, time-bounded access tokens."""

    def mint(self, subject_id: str, secret: str, ttl: timedelta) -> str:
        """
        Encode and sign a token for ``subject_id`` valid for ``ttl``.

        Non-positive ``ttl`` values are accepted and yield an expired token.
        """

    def verify(self, token: str, secret: str) -> str:
        """
        Verify signature and expiry, then return the subject identifier.

        :raises SignatureError: Wrong secret or tampered token.
        :raises ExpiredError: ``now >= exp``.
        :raises MalformedTokenError: Structurally invalid token or missing claims.
        """


class PasswordHasher(Protocol):
    """Port for one-way password hashing."""

    def hash(self, plaintext: str) -> str:
        """Return a salted, self-describing hash. :raises HashingError: on internal failure."""

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Return whether ``plaintext`` matches. :raises HashingError: if the hash is malformed."""
