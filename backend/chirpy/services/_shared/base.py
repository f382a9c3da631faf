# chirpy/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from chirpy.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


@dataclass(slots=True)
class ServiceContext:
    """
    Request-scoped data handed to a service.

    :param actor_id: Authenticated subject, when there is one.
    :param request_id: Correlation id copied into log lines.
    """

    actor_id: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Common plumbing for application services.

    Subclasses get unit-of-work factories and a UTC clock. Services that only
    talk to ports (stores, codecs) never open a unit of work themselves.
    """

    #: Isolation used by :meth:`ro_uow` unless the caller overrides it
    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Open a read-only unit of work.

        :param isolation: Isolation level, :attr:`DEFAULT_READ_ISOLATION` when omitted.
        :param enforce_db_readonly: Also issue ``SET TRANSACTION READ ONLY`` where supported.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
