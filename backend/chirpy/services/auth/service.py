"""Login, refresh, revoke and access-token checks over injected ports."""

from __future__ import annotations

import logging

from chirpy.services._shared.base import BaseService, ServiceContext
from chirpy.services._shared.errors import (
    AuthenticationError,
    AuthFailure,
    ExpiredError,
    NotFoundError,
    TokenError,
)
from chirpy.services._shared.ports import (
    AccessTokenCodec,
    CredentialStore,
    PasswordHasher,
    RefreshTokenStore,
)
from chirpy.services._shared.tokens import new_refresh_token_value, token_ref
from chirpy.services.auth.dto import (
    AccessTokenOut,
    AuthTokenConfig,
    LoginIn,
    RefreshTokenView,
    TokenPairOut,
)
from chirpy.services.auth.lifecycle import REFUSALS, RefreshTokenState, classify

logger = logging.getLogger(__name__)

# Client-facing messages never say which credential check failed
INVALID_CREDENTIALS = "incorrect email or password"
UNKNOWN_REFRESH_TOKEN = "couldn't find token"
INVALID_ACCESS_TOKEN = "couldn't validate token"


class SessionManager(BaseService):
    """
    Session lifecycle service (login / refresh / revoke).

    Access tokens are stateless JWTs minted by an :class:`AccessTokenCodec`.
    Refresh tokens are opaque random values persisted in a
    :class:`RefreshTokenStore`; their usability follows the ordered state table
    in :mod:`chirpy.services.auth.lifecycle`.
    """

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        codec: AccessTokenCodec,
        refresh_store: RefreshTokenStore,
        credentials: CredentialStore,
        cfg: AuthTokenConfig,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param hasher: Password hashing adapter.
        :param codec: Access token adapter.
        :param refresh_store: Stateful store for refresh tokens.
        :param credentials: Credential lookup by email.
        :param cfg: Secret and token lifetimes.
        """
        super().__init__(ctx=ctx)
        self.hasher = hasher
        self.codec = codec
        self.refresh_store = refresh_store
        self.credentials = credentials
        self.cfg = cfg

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises AuthenticationError: Unknown email or wrong password.
        :raises HashingError: The stored hash is malformed.
        """
        try:
            credential = self.credentials.get_by_email(dto.email)
        except NotFoundError as exc:
            self._refuse("auth.login", AuthFailure.UNKNOWN_EMAIL)
            raise AuthenticationError(INVALID_CREDENTIALS, reason=AuthFailure.UNKNOWN_EMAIL) from exc

        if not self.hasher.verify(dto.password, credential.password_hash):
            self._refuse("auth.login", AuthFailure.BAD_PASSWORD, subject_id=credential.subject_id)
            raise AuthenticationError(INVALID_CREDENTIALS, reason=AuthFailure.BAD_PASSWORD)

        access = self.codec.mint(credential.subject_id, self.cfg.secret, self.cfg.access_expires)
        record = self.refresh_store.create(
            subject_id=credential.subject_id,
            value=new_refresh_token_value(),
            expires_at=self.now_utc() + self.cfg.refresh_expires,
        )
        logger.info(
            "Login succeeded",
            extra={
                "event": "auth.login",
                "subject_id": credential.subject_id,
                "token_ref": token_ref(record.value),
            },
        )
        return TokenPairOut(access_token=access, refresh_token=record.value)

    def refresh(self, value: str) -> AccessTokenOut:
        """
        Mint a new access token from a usable refresh token.

        The refresh token itself is neither rotated nor extended.

        :param value: Refresh token value.
        :raises AuthenticationError: Unknown, expired or revoked token.
        """
        try:
            record = self.refresh_store.lookup(value)
        except NotFoundError as exc:
            self._refuse("auth.refresh", AuthFailure.UNKNOWN_TOKEN, ref=token_ref(value))
            raise AuthenticationError(UNKNOWN_REFRESH_TOKEN, reason=AuthFailure.UNKNOWN_TOKEN) from exc

        state = classify(record, self.now_utc())
        if state is not RefreshTokenState.ACTIVE:
            message, reason = REFUSALS[state]
            self._refuse(
                "auth.refresh", reason, subject_id=record.subject_id, ref=token_ref(value)
            )
            raise AuthenticationError(message, reason=reason)

        access = self.codec.mint(record.subject_id, self.cfg.secret, self.cfg.access_expires)
        logger.info(
            "Access token refreshed",
            extra={
                "event": "auth.refresh",
                "subject_id": record.subject_id,
                "token_ref": token_ref(value),
            },
        )
        return AccessTokenOut(access_token=access)

    def revoke(self, value: str) -> None:
        """Mark a refresh token revoked. Unknown or already revoked values are a no-op."""
        self.refresh_store.revoke(value)
        logger.info("Refresh token revoked", extra={"event": "auth.revoke", "token_ref": token_ref(value)})

    def authenticate(self, access_token: str) -> str:
        """
        Verify an access token and return its subject id.

        :raises AuthenticationError: On any token failure; ``reason`` is
            ``EXPIRED`` for expiry and ``INVALID_TOKEN`` otherwise.
        """
        try:
            return self.codec.verify(access_token, self.cfg.secret)
        except ExpiredError as exc:
            self._refuse("auth.access", AuthFailure.EXPIRED)
            raise AuthenticationError(INVALID_ACCESS_TOKEN, reason=AuthFailure.EXPIRED) from exc
        except TokenError as exc:
            self._refuse("auth.access", AuthFailure.INVALID_TOKEN, detail=str(exc))
            raise AuthenticationError(INVALID_ACCESS_TOKEN, reason=AuthFailure.INVALID_TOKEN) from exc

    def describe(self, value: str) -> RefreshTokenView:
        """
        Administrative lookup of a refresh token with its computed state.

        :raises NotFoundError: If the value is unknown (not collapsed).
        """
        record = self.refresh_store.lookup(value)
        return RefreshTokenView(
            subject_id=record.subject_id,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            revoked_at=record.revoked_at,
            state=classify(record, self.now_utc()),
        )

    @staticmethod
    def _refuse(
        event: str,
        reason: AuthFailure,
        *,
        subject_id: str | None = None,
        ref: str | None = None,
        detail: str | None = None,
    ) -> None:
        extra: dict[str, str] = {"event": f"{event}.refused", "reason": reason.value}
        if subject_id is not None:
            extra["subject_id"] = subject_id
        if ref is not None:
            extra["token_ref"] = ref
        if detail is not None:
            extra["detail"] = detail
        logger.warning("Authentication refused", extra=extra)
