"""Column mixins shared by the mapped classes."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


def new_uuid() -> str:
    return str(uuid4())


class UUIDPKMixin:
    """String primary key ``id`` holding a UUID4 generated in Python."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)


class TimestampMixin:
    """
    ``created_at`` / ``updated_at`` maintained by the database clock.

    Both columns are timezone-aware; ``updated_at`` is bumped on every UPDATE.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ReprMixin:
    # Attribute shown in ``repr``; never point this at a secret column
    __repr_key__ = "id"

    def __repr__(self) -> str:
        value = getattr(self, self.__repr_key__, None)
        return f"<{type(self).__name__} {self.__repr_key__}={value}>"
