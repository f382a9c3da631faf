# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from chirpy.services._shared.errors import ConflictError, NotFoundError
from chirpy.services._shared.ports import RefreshTokenRecord, RefreshTokenStore
from chirpy.services._shared.tokens import token_ref

FIELDS = ("subject_id", "issued_at", "expires_at", "revoked_at")


def _s(raw: bytes | str | None) -> str:
    """Decode a hash field that may come back as bytes or str."""
    if raw is None:
        return ""
    return raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Each token is a hash ``rt:<value>`` with ``subject_id``, ``issued_at``,
    ``expires_at`` and ``revoked_at`` (epoch seconds, empty while unset).
    Keys carry no TTL: expired and revoked records are retained for audit.

    Writes use WATCH/MULTI/EXEC so a concurrent create or revoke of the same
    key is retried instead of overwritten.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(value: str) -> str:
        return f"rt:{value}"

    @staticmethod
    def _to_ts(dt: datetime) -> str:
        # Naive datetimes are labelled UTC (no conversion)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return repr(dt.timestamp())

    @staticmethod
    def _from_ts(raw: str) -> datetime:
        return datetime.fromtimestamp(float(raw), tz=UTC)

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    # -------------------- API ------------------------

    def create(self, *, subject_id: str, value: str, expires_at: datetime) -> RefreshTokenRecord:
        key = self._k(value)
        issued_at = self._now()
        mapping = {
            "subject_id": str(subject_id),
            "issued_at": self._to_ts(issued_at),
            "expires_at": self._to_ts(expires_at),
            "revoked_at": "",
        }

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    if p.exists(key):
                        p.unwatch()
                        raise ConflictError("RefreshToken", "token value already exists")
                    p.multi()
                    p.hset(key, mapping=mapping)
                    p.execute()
                break
            except redis.WatchError:
                # Concurrent write on the same key; re-check existence
                continue

        return self._record(value, mapping)

    def lookup(self, value: str) -> RefreshTokenRecord:
        h = self.r.hgetall(self._k(value))
        if not h:
            raise NotFoundError("RefreshToken", token_ref(value))
        fields = {_s(k): _s(v) for k, v in h.items()}
        return self._record(value, fields)

    def revoke(self, value: str) -> None:
        key = self._k(value)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    if not p.exists(key) or _s(p.hget(key, "revoked_at")):
                        # Unknown or already revoked: keep the first timestamp
                        p.unwatch()
                        return
                    p.multi()
                    p.hset(key, "revoked_at", self._to_ts(self._now()))
                    p.execute()
                return
            except redis.WatchError:
                continue

    # -------------------- mapping --------------------

    def _record(self, value: str, fields: dict[str, str]) -> RefreshTokenRecord:
        revoked_raw = fields.get("revoked_at", "")
        return RefreshTokenRecord(
            value=value,
            subject_id=fields["subject_id"],
            issued_at=self._from_ts(fields["issued_at"]),
            expires_at=self._from_ts(fields["expires_at"]),
            revoked_at=self._from_ts(revoked_raw) if revoked_raw else None,
        )
