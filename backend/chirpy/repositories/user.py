"""User repository for persistence of accounts and credentials."""

from __future__ import annotations

from typing import cast

from sqlalchemy import delete

from chirpy.models.user import User
from chirpy.repositories.base import BaseRepository
from chirpy.services._shared.ports import normalize_email


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Password hashing happens in the service layer; this repository only stores
    the resulting hash string.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _filterable_fields(self):
        return {"email": User.email}

    def _updatable_fields(self):
        return {"email", "password_hash"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        return cast(User | None, self.find_one(email=normalize_email(email)))

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        return self.exists(email=normalize_email(email))

    # ---------------------------- Bulk ops ----------------------------

    def delete_all(self) -> int:
        """Delete every user row. Returns the number of deleted rows."""
        result = self.session.execute(delete(User))
        return int(result.rowcount or 0)
