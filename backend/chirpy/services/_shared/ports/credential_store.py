from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from chirpy.services._shared.errors import ConflictError, NotFoundError


@dataclass(frozen=True, slots=True)
class Credential:
    """
    Login material for a subject.

    :ivar subject_id: Owner identifier (user id).
    :ivar password_hash: Self-describing password hash string.
    """

    subject_id: str
    password_hash: str


class CredentialStore(Protocol):
    """Read access to stored credentials, keyed by normalized email."""

    def get_by_email(self, email: str) -> Credential:
        """
        Return the credential registered for ``email``.

        :raises NotFoundError: If no user has that email.
        """


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address."""
    return email.strip().lower()


class InMemoryCredentialStore(CredentialStore):
    """Simple in-memory credential store for unit tests."""

    def __init__(self) -> None:
        self._by_email: dict[str, Credential] = {}
        self._lock = threading.Lock()

    def add(self, email: str, password_hash: str, *, subject_id: str | None = None) -> Credential:
        """Register a credential and return it."""
        key = normalize_email(email)
        with self._lock:
            if key in self._by_email:
                raise ConflictError("User", "email already in use")
            credential = Credential(subject_id=subject_id or str(uuid4()), password_hash=password_hash)
            self._by_email[key] = credential
            return credential

    def get_by_email(self, email: str) -> Credential:
        with self._lock:
            credential = self._by_email.get(normalize_email(email))
        if credential is None:
            raise NotFoundError("User", "email")
        return credential
