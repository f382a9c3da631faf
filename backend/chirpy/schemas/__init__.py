"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AccessTokenSchema, LoginSchema, RefreshTokenViewSchema, TokenPairSchema
from .user import UserCredentialsSchema, UserSchema

__all__ = [
    "AccessTokenSchema",
    "LoginSchema",
    "RefreshTokenViewSchema",
    "TokenPairSchema",
    "UserCredentialsSchema",
    "UserSchema",
]
