"""Development-only administrative endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app

from chirpy.api.deps import container, json_response, timing
from chirpy.core.errors import Forbidden

bp = Blueprint("admin", __name__)


@bp.post("/reset")
@timing
def reset():
    """Delete every user (and their refresh tokens). Only when ``PLATFORM == "dev"``."""

    if current_app.config.get("PLATFORM") != "dev":
        raise Forbidden("Reset is only allowed in dev environment")
    deleted = container().identity().purge_users()
    return json_response({"data": {"deleted_users": deleted}})
