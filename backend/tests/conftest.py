"""Pytest fixtures for an isolated application and database per test.

Each test gets a fresh application bound to its own in-memory SQLite database
(Flask-SQLAlchemy keeps one connection per in-memory engine), so commits made
by units of work never leak between cases.
"""

from __future__ import annotations

import os

import fakeredis
import pytest
from chirpy.core.config import TestingConfig
from chirpy.core.extensions import db as _db  # Flask-SQLAlchemy instance
from chirpy.factory import create_app  # application factory under test
from chirpy.infra.crypto.argon2_password_hasher import Argon2PasswordHasher
from chirpy.infra.jwt.pyjwt_access_token_codec import JWTAccessTokenCodec
from chirpy.services._shared.ports import InMemoryCredentialStore, InMemoryRefreshTokenStore
from chirpy.services.auth.dto import AuthTokenConfig

TEST_SECRET = TestingConfig.JWT_SECRET


@pytest.fixture()
def app():
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with :class:`TestingConfig`, an active app context and
        all tables created.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    """Database extension bound to the testing application."""
    return _db


@pytest.fixture()
def session(db):
    """Flask-scoped SQLAlchemy session used by the units of work."""
    return db.session


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Security primitives -------------------------------------------------------


@pytest.fixture(scope="session")
def hasher() -> Argon2PasswordHasher:
    """argon2id hasher with minimal costs."""
    return Argon2PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture(scope="session")
def codec() -> JWTAccessTokenCodec:
    return JWTAccessTokenCodec()


@pytest.fixture()
def token_cfg() -> AuthTokenConfig:
    return AuthTokenConfig(secret=TEST_SECRET)


@pytest.fixture()
def refresh_store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


# -- Hook up Factory Boy to the Flask-scoped session ---------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when the test uses the database."""
    from tests.factories import SQLAlchemySession

    if "app" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
