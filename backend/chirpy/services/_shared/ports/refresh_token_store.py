from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from chirpy.services._shared.errors import ConflictError, NotFoundError
from chirpy.services._shared.tokens import token_ref


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for a persisted refresh token.

    :ivar value: Opaque, high-entropy token value (unique).
    :ivar subject_id: Owner identifier.
    :ivar issued_at: Creation instant (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked_at: Revocation instant, ``None`` while not revoked.
    """

    value: str
    subject_id: str
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh tokens.

    Implementations MUST give read-after-write consistency for a single value:
    a ``revoke`` followed by a ``lookup`` of the same value observes
    ``revoked_at``. Records are never deleted by the core.
    """

    def create(self, *, subject_id: str, value: str, expires_at: datetime) -> RefreshTokenRecord:
        """
        Persist a new refresh token issued now.

        :raises ConflictError: If ``value`` already exists.
        """

    def lookup(self, value: str) -> RefreshTokenRecord:
        """
        Fetch a refresh token by value.

        :raises NotFoundError: If the value is unknown.
        """

    def revoke(self, value: str) -> None:
        """Set ``revoked_at`` to now unless already set. Unknown values are a no-op."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock so each call is atomic, matching the consistency
       guarantees of the persistent adapters.
    """

    def __init__(self) -> None:
        self._by_value: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def create(self, *, subject_id: str, value: str, expires_at: datetime) -> RefreshTokenRecord:
        with self._lock:
            if value in self._by_value:
                raise ConflictError("RefreshToken", "token value already exists")
            record = RefreshTokenRecord(
                value=value,
                subject_id=str(subject_id),
                issued_at=self._now(),
                expires_at=expires_at,
            )
            self._by_value[value] = record
            return record

    def lookup(self, value: str) -> RefreshTokenRecord:
        with self._lock:
            record = self._by_value.get(value)
        if record is None:
            raise NotFoundError("RefreshToken", token_ref(value))
        return record

    def revoke(self, value: str) -> None:
        with self._lock:
            record = self._by_value.get(value)
            if record is None or record.revoked_at is not None:
                return
            self._by_value[value] = replace(record, revoked_at=self._now())

    def put(self, record: RefreshTokenRecord) -> None:
        """Insert or overwrite a record verbatim (test seeding helper)."""
        with self._lock:
            self._by_value[record.value] = record
