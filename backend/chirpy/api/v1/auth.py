"""Session endpoints: login, refresh and revoke."""

from __future__ import annotations

from flask import Blueprint, request

from chirpy.api.deps import bearer_token, container, json_response, timing
from chirpy.schemas import AccessTokenSchema, LoginSchema, TokenPairSchema
from chirpy.services.auth.dto import LoginIn

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
token_pair_schema = TokenPairSchema()
access_token_schema = AccessTokenSchema()


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access + refresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = container().sessions().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response({"data": token_pair_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Mint a new access token from the bearer refresh token."""

    out = container().sessions().refresh(bearer_token())
    return json_response({"data": access_token_schema.dump(out)})


@bp.post("/revoke")
@timing
def revoke():
    """Revoke the bearer refresh token. Always 204 once the header parses."""

    container().sessions().revoke(bearer_token())
    return "", 204
