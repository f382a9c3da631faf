"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class UserCredentialsSchema(Schema):
    """Payload for registering a user or replacing their credentials."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class UserSchema(Schema):
    """Public representation of a user entity."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
