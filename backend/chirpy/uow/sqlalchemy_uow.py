"""
SQLAlchemy units of work over the Flask-scoped session.

Both flavours expose the same repositories (``users``, ``refresh_tokens``)
bound to one session, so everything touched inside a ``with`` block shares a
transaction.
"""

from __future__ import annotations

import logging

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from chirpy.core.extensions import db
from chirpy.repositories import RefreshTokenRepository, UserRepository
from chirpy.uow.base import UnitOfWork

logger = logging.getLogger(__name__)

# Dialects that understand SET TRANSACTION directives
_SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")

# First SQL keyword of statements refused inside a read-only scope
_WRITE_VERBS = frozenset(
    {"insert", "update", "delete", "merge", "alter", "drop", "truncate", "create", "replace"}
)


class SQLAlchemyRepositoryContainer:
    """Repositories sharing one session."""

    def __init__(self, *, session: scoped_session[Session]) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """Read-write scope: commit on clean exit, roll back on error."""

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class _WriteGuard:
    """
    Event listeners that turn any write into ``RuntimeError``.

    ``before_flush`` catches ORM changes, ``before_cursor_execute`` catches
    textual and Core DML on the scope's connection.
    """

    def __init__(self, session: Session, connection: Connection) -> None:
        self.session = session
        self.connection = connection
        self._installed = False

    @staticmethod
    def _on_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )

    @staticmethod
    def _on_execute(conn, cursor, statement, parameters, context, executemany) -> None:
        verb = statement.lstrip().split(None, 1)[0].lower() if statement.strip() else ""
        if verb in _WRITE_VERBS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {verb.upper()}")

    def install(self) -> None:
        event.listen(self.session, "before_flush", self._on_flush)
        event.listen(self.connection, "before_cursor_execute", self._on_execute)
        self._installed = True

    def remove(self) -> None:
        if not self._installed:
            return
        for target, name, fn in (
            (self.session, "before_flush", self._on_flush),
            (self.connection, "before_cursor_execute", self._on_execute),
        ):
            try:
                event.remove(target, name, fn)
            except InvalidRequestError:
                # Connection already released by the rollback
                logger.debug("Guard %s already detached", name)
        self._installed = False


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope over the Flask-scoped session.

    When no transaction is open, the scope opens one, applies the isolation
    level and ``READ ONLY`` on dialects that support them, and rolls it back on
    exit. When a transaction is already open, the scope only installs the write
    guards and leaves the transaction to its owner.

    ``commit()`` always raises.
    """

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owns_transaction = False
        self._guard: _WriteGuard | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # db.session is a scoped_session; transaction state lives on the Session it proxies
        current = self.session()
        self._owns_transaction = not current.in_transaction()
        if self._owns_transaction:
            current.begin()

        connection = current.connection()
        if self._owns_transaction and connection.dialect.name in _SET_TRANSACTION_DIALECTS:
            self._apply_directives()

        self._guard = _WriteGuard(current, connection)
        self._guard.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.session.rollback()
        finally:
            if self._guard is not None:
                self._guard.remove()
                self._guard = None
            self._owns_transaction = False

    def commit(self) -> None:
        """:raises RuntimeError: always."""
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _apply_directives(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            logger.warning("SET TRANSACTION failed (%s); relying on write guards only", exc)
