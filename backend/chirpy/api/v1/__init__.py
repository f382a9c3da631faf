"""Version 1 of the HTTP API."""

from __future__ import annotations

from flask import Blueprint

from .admin import bp as admin_bp
from .auth import bp as auth_bp
from .health import bp as health_bp
from .users import bp as users_bp

API_VERSION = "v1"

# (blueprint, prefix relative to /api/v1)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (users_bp, "/users"),
    (admin_bp, "/admin"),
]
