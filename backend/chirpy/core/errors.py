"""HTTP translation of service errors into ``application/problem+json`` bodies."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from chirpy.core.logger import ensure_request_id
from chirpy.services._shared.errors import (
    AuthenticationError,
    AuthFailure,
    ConflictError,
    ExpiredError,
    MalformedInputError,
    NotFoundError,
    TokenError,
)

log = logging.getLogger(__name__)

# The one message a client ever sees for a refused credential
AUTH_REQUIRED = "Authentication required"

PROBLEM_MIMETYPE = "application/problem+json"

# Stable machine codes for statuses raised by werkzeug
_STATUS_CODES: dict[int, str] = {
    HTTPStatus.BAD_REQUEST: "bad_request",
    HTTPStatus.UNAUTHORIZED: "unauthorized",
    HTTPStatus.FORBIDDEN: "forbidden",
    HTTPStatus.NOT_FOUND: "not_found",
    HTTPStatus.METHOD_NOT_ALLOWED: "method_not_allowed",
    HTTPStatus.CONFLICT: "conflict",
    HTTPStatus.REQUEST_ENTITY_TOO_LARGE: "payload_too_large",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "unsupported_media_type",
    HTTPStatus.UNPROCESSABLE_ENTITY: "unprocessable_entity",
    HTTPStatus.INTERNAL_SERVER_ERROR: "internal_server_error",
    HTTPStatus.SERVICE_UNAVAILABLE: "service_unavailable",
}


def problem(
    status: int, code: str, detail: str, *, extra: dict[str, Any] | None = None
) -> tuple[Response, int]:
    """
    Build a problem+json response for the current request.

    :param status: HTTP status.
    :param code: Stable snake_case identifier.
    :param detail: Client-safe summary.
    :param extra: Structured details, rendered under ``details``.
    :returns: ``(response, status)`` ready to return from a handler.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": detail,
        "instance": request.path,
        "code": code,
    }
    if extra:
        body["details"] = extra
    body["request_id"] = ensure_request_id()
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, int(status)


class APIError(Exception):
    """
    Error raised by view code that maps directly to a status.

    Subclasses pin ``status_code`` and ``code``; callers only pick the message.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str = "bad_request"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = int(status_code)
        if code is not None:
            self.code = code
        self.details = details or {}


class Forbidden(APIError):
    """The deployment does not allow this action."""

    status_code = HTTPStatus.FORBIDDEN
    code = "forbidden"

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


# ---- handlers ----


def _api_error(err: APIError):
    (log.error if err.status_code >= 500 else log.warning)(
        "APIError %s (%s): %s", err.code, err.status_code, err.message
    )
    return problem(err.status_code, err.code, err.message, extra=err.details or None)


def _auth_reason(err: Exception) -> AuthFailure:
    if isinstance(err, AuthenticationError):
        return err.reason
    if isinstance(err, ExpiredError):
        return AuthFailure.EXPIRED
    if isinstance(err, TokenError):
        return AuthFailure.INVALID_TOKEN
    # Absent or unparseable Authorization header
    return AuthFailure.MISSING_CREDENTIALS


def _unauthorized(err: Exception):
    # Reason goes to the log only; every variant gets the same body
    reason = _auth_reason(err).value
    log.warning(
        "Request unauthorized: %s",
        err,
        extra={"event": "http.unauthorized", "reason": reason},
    )
    return problem(HTTPStatus.UNAUTHORIZED, "unauthorized", AUTH_REQUIRED)


def _not_found(err: NotFoundError):
    log.warning("Not found: %s", err)
    return problem(HTTPStatus.NOT_FOUND, "not_found", str(err))


def _conflict(err: ConflictError):
    log.warning("Conflict: %s", err)
    return problem(HTTPStatus.CONFLICT, "conflict", str(err))


def _http_exception(err: HTTPException):
    status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
    code = _STATUS_CODES.get(status, "error")
    if status == HTTPStatus.NOT_FOUND:
        detail = f"Route '{request.path}' not found"
    else:
        detail = (err.description or code.replace("_", " ").capitalize()).strip()
    (log.error if status >= 500 else log.warning)("HTTP %s on %s", status, request.path)
    return problem(status, code, detail)


def _validation(err: ValidationError):
    log.warning("Payload rejected", extra={"event": "http.validation"})
    return problem(
        HTTPStatus.UNPROCESSABLE_ENTITY,
        "validation_error",
        "Validation failed",
        extra={"errors": err.messages},
    )


def _integrity(err: IntegrityError):
    log.error("IntegrityError", exc_info=True)
    return problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict")


def _db_unavailable(err: OperationalError):
    log.error("OperationalError", exc_info=True)
    return problem(
        HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable", "Service temporarily unavailable"
    )


def _unexpected(err: Exception):
    # HashingError ends up here: an internal fault, never a bad password
    log.error("Unhandled exception", exc_info=True)
    return problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error")


HANDLERS: tuple[tuple[type[Exception], Any], ...] = (
    (APIError, _api_error),
    (AuthenticationError, _unauthorized),
    (MalformedInputError, _unauthorized),
    (TokenError, _unauthorized),
    (NotFoundError, _not_found),
    (ConflictError, _conflict),
    (HTTPException, _http_exception),
    (ValidationError, _validation),
    (IntegrityError, _integrity),
    (OperationalError, _db_unavailable),
    (Exception, _unexpected),
)


def init_app(app: Flask) -> None:
    """Register every handler in :data:`HANDLERS` on ``app``."""
    for exc_type, handler in HANDLERS:
        app.register_error_handler(exc_type, handler)
