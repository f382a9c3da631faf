"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from chirpy.repositories.base import BaseRepository
from chirpy.repositories.refresh_token import RefreshTokenRepository
from chirpy.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
