# chirpy/services/auth/lifecycle.py
"""
Refresh token state machine.

::

    ACTIVE --(now >= expires_at)--> EXPIRED   (terminal)
    ACTIVE --(revoked_at set)-----> REVOKED   (terminal)

Classification walks :data:`STATE_RULES` in order and returns the first
matching state, so expiry takes precedence over revocation.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum

from chirpy.services._shared.errors import AuthFailure
from chirpy.services._shared.ports import RefreshTokenRecord


class RefreshTokenState(Enum):
    """Lifecycle state of a stored refresh token."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


Rule = Callable[[RefreshTokenRecord, datetime], bool]

# Ordered: first match wins. A record matching no rule is ACTIVE.
STATE_RULES: tuple[tuple[RefreshTokenState, Rule], ...] = (
    (RefreshTokenState.EXPIRED, lambda record, now: now >= record.expires_at),
    (RefreshTokenState.REVOKED, lambda record, now: record.revoked_at is not None),
)

TRANSITIONS: Mapping[RefreshTokenState, frozenset[RefreshTokenState]] = {
    RefreshTokenState.ACTIVE: frozenset({RefreshTokenState.EXPIRED, RefreshTokenState.REVOKED}),
    RefreshTokenState.EXPIRED: frozenset(),
    RefreshTokenState.REVOKED: frozenset(),
}

# Refusal detail per non-usable state
REFUSALS: Mapping[RefreshTokenState, tuple[str, AuthFailure]] = {
    RefreshTokenState.EXPIRED: ("expired token, please log in", AuthFailure.EXPIRED),
    RefreshTokenState.REVOKED: ("token revoked", AuthFailure.REVOKED),
}


def classify(record: RefreshTokenRecord, now: datetime) -> RefreshTokenState:
    """Return the state of ``record`` at instant ``now``."""
    for state, matches in STATE_RULES:
        if matches(record, now):
            return state
    return RefreshTokenState.ACTIVE


def can_transition(source: RefreshTokenState, target: RefreshTokenState) -> bool:
    """Return whether ``source -> target`` is a legal lifecycle transition."""
    return target in TRANSITIONS[source]


def is_terminal(state: RefreshTokenState) -> bool:
    return not TRANSITIONS[state]
