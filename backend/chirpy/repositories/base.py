"""Persistence-only base repository (SQLAlchemy 2.x ``select`` style).

Repositories never commit: the unit of work that handed them their session
decides. Filtering and updates go through per-repository whitelists so no
caller can reach an arbitrary column.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from chirpy.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """
    CRUD helpers for one mapped class.

    Subclasses set :attr:`model` and may override :meth:`_pk_attr`,
    :meth:`_filterable_fields` and :meth:`_updatable_fields`.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The injected session, else the Flask-scoped one."""
        return self._session if self._session is not None else db.session

    # ---- whitelists ----

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        return self.model.id  # type: ignore[attr-defined]

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any]) -> Select[Any]:
        """
        Add ``column == value`` clauses for whitelisted keys.

        :raises ValueError: If a key is not in :meth:`_filterable_fields`.
        """
        allowed = self._filterable_fields()
        rejected = sorted(set(filters) - set(allowed))
        if rejected:
            raise ValueError(f"Unknown or non-filterable fields: {rejected}")
        for key, value in filters.items():
            stmt = stmt.where(allowed[key] == value)
        return stmt

    # ---- reads ----

    def get(self, entity_id: Any) -> E | None:
        """Return the row whose primary key is ``entity_id``, or ``None``."""
        stmt = select(self.model).where(self._pk_attr() == entity_id)
        return self.session.execute(stmt).scalars().first()

    def find_one(self, **filters: Any) -> E | None:
        stmt = self._where(select(self.model), filters)
        return self.session.execute(stmt).scalars().first()

    def exists(self, **filters: Any) -> bool:
        stmt = self._where(select(func.count()).select_from(self.model), filters)
        return bool(self.session.execute(stmt).scalar())

    # ---- writes ----

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so generated keys and constraints apply now."""
        self.session.add(instance)
        self.flush()
        return instance

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any], *, flush: bool = True) -> E:
        """
        Set whitelisted attributes on ``instance``.

        Assignment goes through ``setattr`` so model ``@validates`` hooks run.

        :raises ValueError: If a key is not in :meth:`_updatable_fields`.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        for key, value in fields.items():
            setattr(instance, key, value)
        if flush:
            self.flush()
        return instance
