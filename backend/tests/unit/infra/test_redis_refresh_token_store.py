# tests/unit/infra/test_redis_refresh_token_store.py
"""
Unit tests for RedisRefreshTokenStore using fakeredis.

These tests exercise the main flows:
- create + lookup
- duplicate values
- revoke (idempotent, unknown values)
- persistence across store instances sharing one server

They use fakeredis.FakeRedis so they run entirely in-memory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from chirpy.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from chirpy.services._shared.errors import ConflictError, NotFoundError
from chirpy.services._shared.tokens import new_refresh_token_value, token_ref
from freezegun import freeze_time


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


@pytest.fixture
def store(fake_redis):
    """Provide a RedisRefreshTokenStore backed by FakeRedis."""
    return RedisRefreshTokenStore(r=fake_redis)


def test_create_and_lookup(store):
    """A created token is returned by lookup with every field intact."""
    value = new_refresh_token_value()
    expires_at = _now() + timedelta(days=60)

    created = store.create(subject_id="user-1", value=value, expires_at=expires_at)
    found = store.lookup(value)

    assert found == created
    assert found.subject_id == "user-1"
    assert found.revoked_at is None
    assert abs(found.expires_at - expires_at) < timedelta(milliseconds=1)
    assert found.issued_at.tzinfo is not None


def test_issued_at_is_creation_instant(store):
    with freeze_time("2026-03-01 10:00:00"):
        record = store.create(
            subject_id="u", value="v" * 64, expires_at=_now() + timedelta(days=1)
        )
    assert record.issued_at == datetime(2026, 3, 1, 10, tzinfo=UTC)
    assert store.lookup("v" * 64).issued_at == record.issued_at


def test_naive_expiry_is_treated_as_utc(store):
    store.create(subject_id="u", value="naive", expires_at=datetime(2030, 1, 1, 12))
    assert store.lookup("naive").expires_at == datetime(2030, 1, 1, 12, tzinfo=UTC)


def test_create_duplicate_value_conflicts(store):
    value = new_refresh_token_value()
    store.create(subject_id="u1", value=value, expires_at=_now() + timedelta(days=1))

    with pytest.raises(ConflictError):
        store.create(subject_id="u2", value=value, expires_at=_now() + timedelta(days=1))

    # First record untouched
    assert store.lookup(value).subject_id == "u1"


def test_lookup_unknown_raises_not_found_without_raw_value(store):
    value = new_refresh_token_value()

    with pytest.raises(NotFoundError) as excinfo:
        store.lookup(value)

    assert value not in str(excinfo.value)
    assert excinfo.value.key == token_ref(value)


def test_revoke_sets_timestamp_and_is_visible(store):
    value = new_refresh_token_value()
    store.create(subject_id="u", value=value, expires_at=_now() + timedelta(days=1))

    store.revoke(value)

    record = store.lookup(value)
    assert record.revoked_at is not None
    assert record.revoked_at <= _now()


def test_revoke_twice_keeps_first_timestamp(store):
    value = new_refresh_token_value()
    store.create(subject_id="u", value=value, expires_at=_now() + timedelta(days=1))

    with freeze_time("2026-05-01 08:00:00"):
        store.revoke(value)
    with freeze_time("2026-05-02 08:00:00"):
        store.revoke(value)

    assert store.lookup(value).revoked_at == datetime(2026, 5, 1, 8, tzinfo=UTC)


def test_revoke_unknown_value_is_a_noop(store, fake_redis):
    store.revoke("does-not-exist")

    assert fake_redis.exists("rt:does-not-exist") == 0
    with pytest.raises(NotFoundError):
        store.lookup("does-not-exist")


def test_keys_have_no_ttl(store, fake_redis):
    """Expired and revoked records stay in Redis."""
    value = new_refresh_token_value()
    store.create(subject_id="u", value=value, expires_at=_now() - timedelta(seconds=1))
    store.revoke(value)

    assert fake_redis.ttl(f"rt:{value}") == -1
    assert store.lookup(value).revoked_at is not None


def test_records_survive_a_new_store_instance(fake_redis):
    value = new_refresh_token_value()
    RedisRefreshTokenStore(r=fake_redis).create(
        subject_id="u", value=value, expires_at=_now() + timedelta(days=1)
    )
    RedisRefreshTokenStore(r=fake_redis).revoke(value)

    record = RedisRefreshTokenStore(r=fake_redis).lookup(value)
    assert record.subject_id == "u"
    assert record.revoked_at is not None


def test_decode_responses_client_is_supported():
    import fakeredis

    r = fakeredis.FakeRedis(decode_responses=True)
    store = RedisRefreshTokenStore(r=r)
    store.create(subject_id="u", value="abc", expires_at=_now() + timedelta(days=1))

    assert store.lookup("abc").subject_id == "u"
