"""Transaction boundary contract shared by the SQLAlchemy implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    A ``with`` block that owns one transaction.

    Implementations expose ``users`` and ``refresh_tokens`` repositories bound
    to that transaction and decide on exit whether it is kept or discarded.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
