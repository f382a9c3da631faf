"""SQLAlchemy adapters for the credential and refresh-token ports."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from chirpy.models.refresh_token import RefreshToken
from chirpy.services._shared.errors import ConflictError, NotFoundError, violates
from chirpy.services._shared.ports import (
    Credential,
    CredentialStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from chirpy.services._shared.tokens import token_ref
from chirpy.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def _aware(dt: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on read; values are stored as UTC."""
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=UTC)


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        value=row.value,
        subject_id=row.subject_id,
        issued_at=_aware(row.issued_at),
        expires_at=_aware(row.expires_at),
        revoked_at=_aware(row.revoked_at),
    )


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Refresh token store on the ``refresh_tokens`` table.

    Every call runs in its own unit of work, so a committed ``revoke`` is
    visible to the next ``lookup`` of the same value.

    :param uow_factory: Builds a read-write unit of work.
    :param ro_uow_factory: Builds a read-only unit of work.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._uow = uow_factory
        self._ro_uow = ro_uow_factory

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def create(self, *, subject_id: str, value: str, expires_at: datetime) -> RefreshTokenRecord:
        with self._uow() as uow:
            if uow.refresh_tokens.get_by_value(value) is not None:
                raise ConflictError("RefreshToken", "token value already exists")
            try:
                row = uow.refresh_tokens.add(
                    RefreshToken(
                        value=value,
                        subject_id=str(subject_id),
                        issued_at=self._now(),
                        expires_at=expires_at,
                    )
                )
            except IntegrityError as exc:
                if violates(exc, "pk_refresh_tokens") or violates(exc, "refresh_tokens.value"):
                    raise ConflictError("RefreshToken", "token value already exists") from exc
                raise
            record = _to_record(row)
        return record

    def lookup(self, value: str) -> RefreshTokenRecord:
        with self._ro_uow() as uow:
            row = uow.refresh_tokens.get_by_value(value)
            if row is None:
                raise NotFoundError("RefreshToken", token_ref(value))
            return _to_record(row)

    def revoke(self, value: str) -> None:
        with self._uow() as uow:
            uow.refresh_tokens.mark_revoked(value, at=self._now())


class SQLAlchemyCredentialStore(CredentialStore):
    """Credential lookup on the ``users`` table."""

    def __init__(
        self,
        *,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._ro_uow = ro_uow_factory

    def get_by_email(self, email: str) -> Credential:
        with self._ro_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", "email")
            return Credential(subject_id=user.id, password_hash=user.password_hash)
