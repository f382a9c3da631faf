"""Mapped ``users`` table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from chirpy.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A registered account.

    ``email`` is stored trimmed and lowercased. ``password_hash`` holds an
    argon2id PHC string, salt included; the plaintext never reaches this class.
    Deleting a user deletes their refresh tokens.
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @validates("email")
    def _clean_email(self, key: str, value: str) -> str:
        """
        :raises ValueError: Empty, not a string, or without an ``@``.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Email is required.")
        cleaned = value.strip().lower()
        if "@" not in cleaned:
            raise ValueError("Email format looks invalid.")
        return cleaned

    @validates("password_hash")
    def _require_hash(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError("Password hash must be a non-empty string.")
        return value
