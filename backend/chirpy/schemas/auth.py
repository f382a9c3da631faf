"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    # No minimum beyond non-empty: a short wrong password is a 401, not a 422
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class TokenPairSchema(Schema):
    """Response payload for a successful login."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")


class AccessTokenSchema(Schema):
    """Response payload for a refresh call."""

    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")


class RefreshTokenViewSchema(Schema):
    """Administrative representation of a stored refresh token."""

    subject_id = fields.String(required=True)
    issued_at = fields.DateTime(required=True)
    expires_at = fields.DateTime(required=True)
    revoked_at = fields.DateTime(allow_none=True)
    state = fields.Function(lambda view: view.state.value)
