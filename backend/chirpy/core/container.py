"""Wire auth adapters from configuration, once per application."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from flask import Flask, current_app

from chirpy.core.config import REFRESH_TOKEN_BACKENDS
from chirpy.core.extensions import get_redis
from chirpy.infra.crypto.argon2_password_hasher import Argon2PasswordHasher
from chirpy.infra.jwt.pyjwt_access_token_codec import JWTAccessTokenCodec
from chirpy.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from chirpy.infra.sql.stores import SQLAlchemyCredentialStore, SQLAlchemyRefreshTokenStore
from chirpy.services._shared.ports import (
    AccessTokenCodec,
    CredentialStore,
    InMemoryRefreshTokenStore,
    PasswordHasher,
    RefreshTokenStore,
)
from chirpy.services.auth.dto import AuthTokenConfig
from chirpy.services.auth.service import SessionManager
from chirpy.services.identity.service import IdentityService

logger = logging.getLogger(__name__)

EXTENSION_KEY = "auth"


@dataclass(slots=True)
class AuthContainer:
    """
    Process-wide auth collaborators.

    Services are cheap and built per call; adapters are shared.
    """

    cfg: AuthTokenConfig
    hasher: PasswordHasher
    codec: AccessTokenCodec
    refresh_store: RefreshTokenStore
    credentials: CredentialStore

    def sessions(self) -> SessionManager:
        return SessionManager(
            hasher=self.hasher,
            codec=self.codec,
            refresh_store=self.refresh_store,
            credentials=self.credentials,
            cfg=self.cfg,
        )

    def identity(self) -> IdentityService:
        return IdentityService(hasher=self.hasher)


def build_refresh_store(config: Mapping[str, Any]) -> RefreshTokenStore:
    """
    Select the refresh token adapter from ``REFRESH_TOKEN_BACKEND``.

    :raises ValueError: Unknown backend name.
    """
    backend = str(config.get("REFRESH_TOKEN_BACKEND", "sql")).strip().lower()
    if backend not in REFRESH_TOKEN_BACKENDS:
        raise ValueError(f"Unknown REFRESH_TOKEN_BACKEND: {backend!r}")
    if backend == "redis":
        return RedisRefreshTokenStore(r=get_redis())
    if backend == "memory":
        return InMemoryRefreshTokenStore()
    return SQLAlchemyRefreshTokenStore()


def build_container(config: Mapping[str, Any]) -> AuthContainer:
    return AuthContainer(
        cfg=AuthTokenConfig.from_mapping(config),
        hasher=Argon2PasswordHasher.from_mapping(config),
        codec=JWTAccessTokenCodec(issuer=str(config.get("JWT_ISSUER", "chirpy"))),
        refresh_store=build_refresh_store(config),
        credentials=SQLAlchemyCredentialStore(),
    )


def init_app(app: Flask) -> None:
    """Build the container and store it on ``app.extensions``."""
    container = build_container(app.config)
    app.extensions[EXTENSION_KEY] = container
    logger.info(
        "Auth container ready",
        extra={"event": "app.auth_ready", "detail": type(container.refresh_store).__name__},
    )


def get_container(app: Flask | None = None) -> AuthContainer:
    """Return the container of ``app`` (or the current app)."""
    target = app or current_app
    try:
        return target.extensions[EXTENSION_KEY]
    except KeyError as exc:
        raise RuntimeError("Auth container is not initialized. Call create_app() first.") from exc
