"""Unit tests for the auth container wiring."""

from __future__ import annotations

import pytest
from chirpy.core import extensions
from chirpy.core.container import (
    EXTENSION_KEY,
    AuthContainer,
    build_container,
    build_refresh_store,
    get_container,
)
from chirpy.infra.crypto.argon2_password_hasher import Argon2PasswordHasher
from chirpy.infra.jwt.pyjwt_access_token_codec import JWTAccessTokenCodec
from chirpy.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from chirpy.infra.sql.stores import SQLAlchemyCredentialStore, SQLAlchemyRefreshTokenStore
from chirpy.services._shared.ports import InMemoryRefreshTokenStore
from chirpy.services.auth.service import SessionManager
from chirpy.services.identity.service import IdentityService
from flask import Flask

BASE = {"JWT_SECRET": "container-secret-that-is-long-enough-000"}


@pytest.mark.parametrize(
    ("backend", "expected"),
    [
        ("sql", SQLAlchemyRefreshTokenStore),
        ("SQL ", SQLAlchemyRefreshTokenStore),
        ("memory", InMemoryRefreshTokenStore),
    ],
)
def test_build_refresh_store_selects_backend(backend, expected):
    assert isinstance(build_refresh_store({"REFRESH_TOKEN_BACKEND": backend}), expected)


def test_build_refresh_store_defaults_to_sql():
    assert isinstance(build_refresh_store({}), SQLAlchemyRefreshTokenStore)


def test_build_refresh_store_redis_uses_shared_client(monkeypatch, fake_redis):
    monkeypatch.setattr(extensions, "redis_client", fake_redis)

    store = build_refresh_store({"REFRESH_TOKEN_BACKEND": "redis"})

    assert isinstance(store, RedisRefreshTokenStore)
    assert store.r is fake_redis


def test_build_refresh_store_redis_without_client(monkeypatch):
    monkeypatch.setattr(extensions, "redis_client", None)

    with pytest.raises(RuntimeError, match="REDIS_URL"):
        build_refresh_store({"REFRESH_TOKEN_BACKEND": "redis"})


def test_build_refresh_store_unknown_backend():
    with pytest.raises(ValueError, match="REFRESH_TOKEN_BACKEND"):
        build_refresh_store({"REFRESH_TOKEN_BACKEND": "mongo"})


def test_build_container_wires_adapters():
    container = build_container(
        {
            **BASE,
            "JWT_ISSUER": "chirpy-test",
            "REFRESH_TOKEN_BACKEND": "memory",
            "ARGON2_TIME_COST": 1,
            "ARGON2_MEMORY_COST": 8,
            "ARGON2_PARALLELISM": 1,
        }
    )

    assert isinstance(container.hasher, Argon2PasswordHasher)
    assert container.hasher.memory_cost == 8
    assert isinstance(container.codec, JWTAccessTokenCodec)
    assert container.codec.issuer == "chirpy-test"
    assert isinstance(container.refresh_store, InMemoryRefreshTokenStore)
    assert isinstance(container.credentials, SQLAlchemyCredentialStore)
    assert container.cfg.secret == BASE["JWT_SECRET"]


def test_build_container_requires_secret():
    with pytest.raises(ValueError):
        build_container({"JWT_SECRET": "", "REFRESH_TOKEN_BACKEND": "memory"})


def test_services_share_adapters():
    container = build_container({**BASE, "REFRESH_TOKEN_BACKEND": "memory"})

    sessions = container.sessions()
    identity = container.identity()

    assert isinstance(sessions, SessionManager)
    assert isinstance(identity, IdentityService)
    assert sessions.refresh_store is container.refresh_store
    assert sessions.hasher is identity.hasher is container.hasher


def test_get_container_from_app(app):
    container = get_container(app)

    assert isinstance(container, AuthContainer)
    assert app.extensions[EXTENSION_KEY] is container
    assert get_container() is container


def test_get_container_without_init():
    with pytest.raises(RuntimeError, match="not initialized"):
        get_container(Flask("bare"))
