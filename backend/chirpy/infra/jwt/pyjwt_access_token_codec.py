# chirpy/infra/jwt/pyjwt_access_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from chirpy.services._shared.errors import ExpiredError, MalformedTokenError, SignatureError
from chirpy.services._shared.ports import AccessTokenCodec

# Claims every access token must carry
REQUIRED_CLAIMS = ("iss", "sub", "iat", "exp", "jti")


@dataclass(slots=True)
class JWTAccessTokenCodec(AccessTokenCodec):
    """
    Adapter for PyJWT producing HS256-signed access tokens.

    Payload claims: ``iss``, ``sub`` (subject id), ``iat``, ``exp`` and a random
    ``jti`` so two tokens minted for the same subject never collide.

    :param issuer: Value written to and required in ``iss``.
    :param algorithm: HMAC algorithm, ``HS256`` by default.
    """

    issuer: str = "chirpy"
    algorithm: str = "HS256"

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def mint(self, subject_id: str, secret: str, ttl: timedelta) -> str:
        now = self._now()
        payload: dict[str, Any] = {
            "iss": self.issuer,
            "sub": str(subject_id),
            "iat": now,
            "exp": now + ttl,
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def verify(self, token: str, secret: str) -> str:
        # PyJWT checks the signature before any time-based claim, so a tampered
        # expired token is reported as a signature failure.
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredError("token is expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise SignatureError("token signature is invalid") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(f"token is malformed: {exc}") from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("token subject is missing")
        return subject
