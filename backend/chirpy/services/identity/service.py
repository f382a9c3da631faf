"""Account registration, lookup, credential replacement and the dev reset."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from chirpy.models.user import User
from chirpy.repositories.user import UserRepository
from chirpy.services._shared.base import BaseService, ServiceContext
from chirpy.services._shared.errors import ConflictError, NotFoundError, violates
from chirpy.services._shared.ports import PasswordHasher
from chirpy.services.identity.dto import (
    UserCredentialsUpdateIn,
    UserPublicOut,
    UserRegisterIn,
)

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "email already in use"


def _is_email_conflict(exc: IntegrityError) -> bool:
    # PostgreSQL reports the constraint name, SQLite the column
    return violates(exc, "uq_users_email") or violates(exc, "users.email")


class IdentityService(BaseService):
    """
    Owns :class:`User` rows.

    Plaintext passwords are hashed with the injected :class:`PasswordHasher`
    before any transaction opens; repositories only ever see the hash.
    """

    def __init__(self, *, hasher: PasswordHasher, ctx: ServiceContext | None = None) -> None:
        super().__init__(ctx=ctx)
        self.hasher = hasher

    def register_user(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Create an account.

        :raises ConflictError: ``dto.email`` is already registered.
        :raises HashingError: The hasher failed.
        """
        password_hash = self.hasher.hash(dto.password)

        with self.rw_uow() as uow:
            users: UserRepository = uow.users
            if users.exists_by_email(dto.email):
                raise ConflictError("User", EMAIL_TAKEN)
            user = self._guard_unique_email(
                lambda: users.add(User(email=dto.email, password_hash=password_hash))
            )
            out = self._to_public(user)

        logger.info("User registered", extra={"event": "identity.register", "subject_id": out.id})
        return out

    def get_user(self, user_id: str) -> UserPublicOut:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return self._to_public(user)

    def update_credentials(self, dto: UserCredentialsUpdateIn) -> UserPublicOut:
        """
        Overwrite email and password of ``dto.user_id``.

        Keeping the same email is allowed; taking another account's is not.

        :raises NotFoundError: The user no longer exists.
        :raises ConflictError: The new email belongs to someone else.
        """
        password_hash = self.hasher.hash(dto.password)

        with self.rw_uow() as uow:
            users: UserRepository = uow.users
            user = users.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)

            holder = users.get_by_email(dto.email)
            if holder is not None and holder.id != user.id:
                raise ConflictError("User", EMAIL_TAKEN)

            self._guard_unique_email(
                lambda: users.assign_updates(
                    user, {"email": dto.email, "password_hash": password_hash}
                )
            )
            # Pick up the server-side updated_at
            uow.session.refresh(user)
            out = self._to_public(user)

        logger.info("Credentials updated", extra={"event": "identity.update", "subject_id": out.id})
        return out

    def purge_users(self) -> int:
        """Delete all refresh tokens and users; return how many users went."""
        with self.rw_uow() as uow:
            uow.refresh_tokens.delete_all()
            deleted = uow.users.delete_all()

        logger.warning("All users deleted", extra={"event": "identity.reset"})
        return deleted

    @staticmethod
    def _guard_unique_email(write):
        """Run ``write``; translate a unique-email violation raced past the pre-check."""
        try:
            return write()
        except IntegrityError as exc:
            if _is_email_conflict(exc):
                raise ConflictError("User", EMAIL_TAKEN) from exc
            raise

    @staticmethod
    def _to_public(user: User) -> UserPublicOut:
        return UserPublicOut(
            id=user.id, email=user.email, created_at=user.created_at, updated_at=user.updated_at
        )
