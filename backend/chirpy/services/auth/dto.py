"""Records exchanged with :class:`SessionManager` and its token settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from chirpy.services.auth.lifecycle import RefreshTokenState


@dataclass(frozen=True, slots=True)
class LoginIn:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """Issued on login: a signed access JWT and an opaque refresh token."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    access_token: str


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """Operator-facing snapshot of a stored refresh token, minus its value."""

    subject_id: str
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None
    state: RefreshTokenState


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Signing key and token lifetimes, resolved once when the app starts.

    Defaults: access tokens live one hour, refresh tokens sixty days.
    """

    secret: str
    access_expires: timedelta = timedelta(hours=1)
    refresh_expires: timedelta = timedelta(days=60)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        """
        Read ``JWT_SECRET``, ``ACCESS_TOKEN_TTL_SECONDS`` and ``REFRESH_TOKEN_TTL_DAYS``.

        :raises ValueError: Empty secret, or a lifetime that is zero or negative.
        """
        secret = str(config.get("JWT_SECRET") or "")
        if not secret:
            raise ValueError("JWT_SECRET must be configured.")
        access = timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 3600)))
        refresh = timedelta(days=int(config.get("REFRESH_TOKEN_TTL_DAYS", 60)))
        if min(access, refresh) <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")
        return cls(secret=secret, access_expires=access, refresh_expires=refresh)
