"""Plain data carried in and out of :class:`IdentityService`.

ORM rows never leave the service; callers receive these frozen records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """Sign-up request. ``password`` is plaintext and only ever hashed."""

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class UserCredentialsUpdateIn:
    """Replace both credentials of ``user_id`` (the authenticated subject)."""

    user_id: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    id: str
    email: str
    created_at: datetime
    updated_at: datetime
