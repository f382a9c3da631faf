"""Refresh token repository (SQL persistence for opaque session tokens)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, update

from chirpy.models.refresh_token import RefreshToken
from chirpy.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def _pk_attr(self):
        return RefreshToken.value

    def _filterable_fields(self):
        return {"subject_id": RefreshToken.subject_id}

    def get_by_value(self, value: str) -> RefreshToken | None:
        return self.get(value)

    def mark_revoked(self, value: str, *, at: datetime) -> bool:
        """
        Set ``revoked_at`` for ``value`` unless it is already set.

        Issued as a single conditional ``UPDATE`` so concurrent revokes keep
        the first timestamp.

        :returns: ``True`` when a row changed.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.value == value, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=at)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def delete_all(self) -> int:
        result = self.session.execute(delete(RefreshToken))
        return int(result.rowcount or 0)
