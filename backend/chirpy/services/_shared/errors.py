"""
Service-layer exceptions.

Nothing here knows about Flask or HTTP; :mod:`chirpy.core.errors` decides the
status code each one maps to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """True when the driver message of ``exc`` names ``constraint_name``."""
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


class ServiceError(Exception):
    """Root of every error raised by services, stores and codecs."""


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """``entity`` has no row for ``key``. ``key`` must never be a secret."""

    entity: str
    key: str

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class AuthFailure(Enum):
    """Why a credential was refused. Logged, never shown to the client."""

    UNKNOWN_EMAIL = "unknown_email"
    BAD_PASSWORD = "bad_password"
    UNKNOWN_TOKEN = "unknown_token"
    EXPIRED = "expired"
    REVOKED = "revoked"
    INVALID_TOKEN = "invalid_token"
    MISSING_CREDENTIALS = "missing_credentials"


class AuthenticationError(ServiceError):
    """A login, refresh token or access token was refused.

    All reasons share one HTTP outcome; ``reason`` lets logs and tests tell
    them apart.
    """

    def __init__(self, message: str, *, reason: AuthFailure) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


class MalformedInputError(ServiceError):
    """A header or token could not even be parsed."""


class MissingHeaderError(MalformedInputError):
    def __init__(self, message: str = "no authorization header") -> None:
        super().__init__(message)


class MalformedHeaderError(MalformedInputError):
    """``Authorization`` is present but is not ``Bearer <token>``."""

    def __init__(self, message: str = "invalid authorization header") -> None:
        super().__init__(message)


class TokenError(ServiceError):
    """Access-token verification failed."""


class SignatureError(TokenError):
    """Wrong key or tampered payload."""


class ExpiredError(TokenError):
    def __init__(self, message: str = "token is expired") -> None:
        super().__init__(message)


class MalformedTokenError(TokenError, MalformedInputError):
    """Not a decodable JWT, or a required claim is missing."""


class HashingError(ServiceError):
    """
    The password hasher itself failed (no entropy, unreadable stored hash).

    This is an internal fault; callers must not report it as a wrong password.
    """
