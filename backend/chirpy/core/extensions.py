"""Process-wide extension singletons: SQLAlchemy, Flask-Migrate and Redis."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine

# Deterministic constraint names keep Alembic diffs stable across dialects
NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
# Batch mode so ALTERs work on SQLite
migrate = Migrate(render_as_batch=True)
redis_client: redis.Redis | None = None

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with FK checks off; refresh-token cascades need them
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _connect_redis(url: str) -> redis.Redis:
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    return client


def init_app(app: Flask) -> None:
    """
    Bind the database, migrations and (when ``REDIS_URL`` is set) Redis to ``app``.

    :raises RuntimeError: ``REDIS_URL`` is set but the server does not answer PING.
    """
    global redis_client

    db.init_app(app)
    # Register mapped classes on the metadata before Alembic inspects it
    from chirpy import models  # noqa: F401

    migrate.init_app(app, db, directory=str(MIGRATIONS_DIR))

    url = app.config.get("REDIS_URL")
    redis_client = _connect_redis(url) if url else None
    if redis_client is None:
        app.extensions.pop("redis_client", None)
    else:
        app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    """:raises RuntimeError: No client was configured."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Set REDIS_URL first.")
    return redis_client
