"""Factory Boy definitions for :class:`chirpy.models.user.User` and refresh tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import factory
from chirpy.infra.crypto.argon2_password_hasher import Argon2PasswordHasher
from chirpy.models.refresh_token import RefreshToken
from chirpy.models.user import User
from chirpy.services._shared.tokens import new_refresh_token_value
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"

_hasher = Argon2PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


class UserFactory(BaseFactory):
    """
    Build persisted :class:`chirpy.models.user.User` instances.

    Pass ``password=...`` to choose the plaintext; the stored hash is argon2id.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password_hash = factory.LazyAttribute(lambda o: _hasher.hash(o.password))


class RefreshTokenFactory(BaseFactory):
    """Build persisted refresh tokens (owned by a new user unless ``subject_id`` is given)."""

    class Meta:
        model = RefreshToken

    value = factory.LazyFunction(new_refresh_token_value)
    subject_id = factory.LazyFunction(lambda: UserFactory().id)
    issued_at = factory.LazyFunction(lambda: datetime.now(UTC))
    expires_at = factory.LazyAttribute(lambda o: o.issued_at + timedelta(days=60))
    revoked_at = None
