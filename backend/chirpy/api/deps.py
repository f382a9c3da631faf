"""View helpers: container access, bearer auth, JSON responses and timing."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, g, jsonify, request

from chirpy.core.container import AuthContainer, get_container
from chirpy.services.auth.bearer import get_bearer_token

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)


def container() -> AuthContainer:
    return get_container()


def bearer_token() -> str:
    """
    Credential from the current request's ``Authorization`` header.

    :raises MissingHeaderError: No header.
    :raises MalformedHeaderError: Not ``Bearer <token>``.
    """
    return get_bearer_token(request.headers)


def require_auth(func: F) -> F:
    """Reject the request unless it carries a valid access token.

    On success the token's subject is available via :func:`current_subject_id`.
    """

    @functools.wraps(func)
    def guarded(*args: Any, **kwargs: Any):
        g.subject_id = container().sessions().authenticate(bearer_token())
        return func(*args, **kwargs)

    return cast(F, guarded)


def current_subject_id() -> str:
    return cast(str, g.subject_id)


def json_response(payload: Any, *, status: int = 200) -> Response:
    resp = jsonify(payload)
    resp.status_code = status
    return resp


def timing(func: F) -> F:
    """Log the wall time of a view at DEBUG, whether it returns or raises."""

    @functools.wraps(func)
    def timed(*args: Any, **kwargs: Any):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            log.debug(
                "request.elapsed",
                extra={
                    "endpoint": request.endpoint,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

    return cast(F, timed)
