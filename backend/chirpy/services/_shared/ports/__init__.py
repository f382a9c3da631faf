"""
chirpy.services._shared.ports
=============================

Collection of *ports* (hexagonal interfaces) that define the contracts for
credential hashing, access tokens, and refresh-token persistence.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.AccessTokenCodec` and :class:`~.PasswordHasher`.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenRecord`,
    plus an in-memory implementation.

- :mod:`credential_store`:
    Defines :class:`~.CredentialStore` and :class:`~.Credential`, plus an
    in-memory implementation.

Concrete adapters (argon2, PyJWT, SQLAlchemy, Redis) live under ``chirpy.infra``.
"""

from __future__ import annotations

from .credential_store import (
    Credential,
    CredentialStore,
    InMemoryCredentialStore,
    normalize_email,
)
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_codec import AccessTokenCodec, PasswordHasher

__all__ = [
    "AccessTokenCodec",
    "PasswordHasher",
    "RefreshTokenStore",
    "RefreshTokenRecord",
    "InMemoryRefreshTokenStore",
    "CredentialStore",
    "Credential",
    "InMemoryCredentialStore",
    "normalize_email",
]
