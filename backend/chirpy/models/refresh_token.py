"""Refresh token model: opaque long-lived session tokens."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chirpy.core.extensions import db

from .base import ReprMixin

if TYPE_CHECKING:
    from .user import User


class RefreshToken(ReprMixin, db.Model):
    """
    Persisted refresh token keyed by its value.

    Rows are never deleted by the auth core; revocation sets ``revoked_at``.
    Deleting the owning user cascades.

    Fields
    ------
    value : str
        64 hex characters, primary key.
    subject_id : str
        Owning user id.
    issued_at, expires_at : datetime
        Issue and absolute expiry instants (UTC).
    revoked_at : datetime | None
        Revocation instant, ``None`` while not revoked.
    """

    __tablename__ = "refresh_tokens"
    __repr_key__ = "subject_id"

    value: Mapped[str] = mapped_column(String(64), primary_key=True)
    subject_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")
