# chirpy/services/auth/bearer.py
"""Parse ``Authorization: Bearer <token>`` header values."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from chirpy.services._shared.errors import MalformedHeaderError, MissingHeaderError

AUTHORIZATION_HEADER = "Authorization"
BEARER_SCHEME = "bearer"


def _header_values(headers: Any, name: str) -> list[str]:
    """
    Collect every value of header ``name`` (case-insensitive).

    Accepts werkzeug ``Headers`` (``getlist``) or a plain mapping whose values
    are either a string or a sequence of strings.
    """
    getlist = getattr(headers, "getlist", None)
    if callable(getlist):
        return list(getlist(name))

    if not isinstance(headers, Mapping):
        raise TypeError(f"Unsupported headers container: {type(headers)!r}")

    values: list[str] = []
    for key, raw in headers.items():
        if str(key).lower() != name.lower():
            continue
        if isinstance(raw, str):
            values.append(raw)
        elif isinstance(raw, Sequence) and not isinstance(raw, (bytes, bytearray)):
            values.extend(str(v) for v in raw)
        else:
            raise TypeError(f"Unsupported value for header {key!r}: {type(raw)!r}")
    return values


def get_bearer_token(headers: Any) -> str:
    """
    Extract the raw token from the ``Authorization`` header.

    :param headers: Request headers (name -> value list, or werkzeug ``Headers``).
    :returns: The token segment, verbatim.
    :raises MissingHeaderError: Header absent or present with zero values.
    :raises MalformedHeaderError: Not exactly ``<scheme> <token>`` or scheme is not Bearer.
    """
    values = _header_values(headers, AUTHORIZATION_HEADER)
    if not values:
        raise MissingHeaderError()

    parts = values[0].split()
    if len(parts) != 2:
        raise MalformedHeaderError()
    scheme, token = parts
    if scheme.lower() != BEARER_SCHEME:
        raise MalformedHeaderError()
    return token
