"""User endpoints: registration and credential update."""

from __future__ import annotations

from flask import Blueprint, request

from chirpy.api.deps import container, current_subject_id, json_response, require_auth, timing
from chirpy.schemas import UserCredentialsSchema, UserSchema
from chirpy.services.identity.dto import UserCredentialsUpdateIn, UserRegisterIn

bp = Blueprint("users", __name__)

credentials_schema = UserCredentialsSchema()
user_schema = UserSchema()


@bp.post("")
@timing
def register():
    """Register a new user and return the created representation."""

    data = credentials_schema.load(request.get_json(silent=True) or {})
    user = container().identity().register_user(
        UserRegisterIn(email=data["email"], password=data["password"])
    )
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.put("")
@require_auth
@timing
def update_credentials():
    """Replace email and password of the authenticated user."""

    data = credentials_schema.load(request.get_json(silent=True) or {})
    user = container().identity().update_credentials(
        UserCredentialsUpdateIn(
            user_id=current_subject_id(),
            email=data["email"],
            password=data["password"],
        )
    )
    return json_response({"data": user_schema.dump(user)})
