# chirpy/infra/crypto/argon2_password_hasher.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import argon2
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from chirpy.services._shared.errors import HashingError
from chirpy.services._shared.ports import PasswordHasher


@dataclass(slots=True)
class Argon2PasswordHasher(PasswordHasher):
    """
    Adapter for ``argon2-cffi`` (argon2id).

    The produced string is in PHC format and embeds the algorithm, version,
    cost parameters and salt, e.g.
    ``$argon2id$v=19$m=65536,t=3,p=4$<salt>$<digest>``, so verification needs
    no external state. Digest comparison is constant time.

    :param time_cost: Number of iterations.
    :param memory_cost: Memory usage in KiB.
    :param parallelism: Number of lanes.
    """

    time_cost: int = argon2.DEFAULT_TIME_COST
    memory_cost: int = argon2.DEFAULT_MEMORY_COST
    parallelism: int = argon2.DEFAULT_PARALLELISM
    _ph: argon2.PasswordHasher = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._ph = argon2.PasswordHasher(
            time_cost=self.time_cost,
            memory_cost=self.memory_cost,
            parallelism=self.parallelism,
            type=argon2.Type.ID,
        )

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> Argon2PasswordHasher:
        """Build a hasher from ``ARGON2_*`` config keys, falling back to library defaults."""
        return cls(
            time_cost=int(config.get("ARGON2_TIME_COST", argon2.DEFAULT_TIME_COST)),
            memory_cost=int(config.get("ARGON2_MEMORY_COST", argon2.DEFAULT_MEMORY_COST)),
            parallelism=int(config.get("ARGON2_PARALLELISM", argon2.DEFAULT_PARALLELISM)),
        )

    def hash(self, plaintext: str) -> str:
        try:
            return self._ph.hash(plaintext)
        except argon2.exceptions.HashingError as exc:
            raise HashingError("password hashing failed") from exc

    def verify(self, plaintext: str, password_hash: str) -> bool:
        try:
            return self._ph.verify(password_hash, plaintext)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, ValueError) as exc:
            # ValueError: non-ASCII hash text
            raise HashingError("stored password hash is malformed") from exc
        except VerificationError as exc:
            # Decoding failures other than a plain mismatch
            raise HashingError("password verification failed") from exc
