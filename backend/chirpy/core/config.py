"""Environment-driven configuration classes for the Flask app."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Selects the config class: development | testing | production
ENV_VAR: Final[str] = "APP_ENV"

# Accepted values for REFRESH_TOKEN_BACKEND
REFRESH_TOKEN_BACKENDS: Final[frozenset[str]] = frozenset({"sql", "redis", "memory"})

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})

# A missing .env file is fine
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag; ``1/true/yes/y/on`` (any case) count as true."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """
    Read an integer, falling back to ``default`` when unset or blank.

    :raises ValueError: The variable is set to something that is not an integer.
    """
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


class BaseConfig:
    """Settings shared by every environment.

    Attributes
    ----------
    JWT_SECRET: str
        HMAC key for access tokens. Changing it invalidates outstanding access
        tokens; stored refresh tokens keep working.
    JWT_ISSUER: str
        ``iss`` claim written into and required from access tokens.
    ACCESS_TOKEN_TTL_SECONDS, REFRESH_TOKEN_TTL_DAYS: int
        Token lifetimes (1 hour and 60 days by default).
    REFRESH_TOKEN_BACKEND: str
        Where refresh tokens live: ``sql``, ``redis`` or ``memory``.
    ARGON2_TIME_COST, ARGON2_MEMORY_COST, ARGON2_PARALLELISM: int
        argon2id cost parameters.
    REDIS_URL: str | None
        Needed only by the ``redis`` backend.
    PLATFORM: str
        ``dev`` unlocks the destructive admin reset.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Access tokens
    JWT_SECRET = os.getenv("JWT_SECRET", "CHANGE_ME_JWT")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "chirpy")
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 3600)

    # Refresh tokens
    REFRESH_TOKEN_TTL_DAYS = env_int("REFRESH_TOKEN_TTL_DAYS", 60)
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sql").strip().lower()

    # argon2-cffi defaults
    ARGON2_TIME_COST = env_int("ARGON2_TIME_COST", 3)
    ARGON2_MEMORY_COST = env_int("ARGON2_MEMORY_COST", 65536)
    ARGON2_PARALLELISM = env_int("ARGON2_PARALLELISM", 4)

    # Storage
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL") or None

    PLATFORM = os.getenv("PLATFORM", "prod").strip().lower()

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local runs: debug on unless ``FLASK_DEBUG`` says otherwise."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Test runs.

    Notes
    -----
    - In-memory SQLite unless ``TEST_DATABASE_URL`` is set.
    - Secret, backend and platform are pinned so the shell env cannot leak in.
    - argon2 runs at its minimum cost.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    PROPAGATE_EXCEPTIONS = True

    JWT_SECRET = "testing-secret-key-with-at-least-32-bytes!"
    REFRESH_TOKEN_BACKEND = "sql"
    REDIS_URL = None
    PLATFORM = "dev"

    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 8
    ARGON2_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    """Deployed runs: no placeholder secret, so an unset ``JWT_SECRET`` fails startup."""

    JWT_SECRET = os.getenv("JWT_SECRET", "")
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the class named by ``APP_ENV`` (development when unset or unknown)."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
