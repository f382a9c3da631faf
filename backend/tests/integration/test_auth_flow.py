"""Integration tests for the session endpoints (login / refresh / revoke)."""

from __future__ import annotations

from datetime import timedelta

import pytest
from chirpy.models.refresh_token import RefreshToken
from freezegun import freeze_time
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.http import assert_unauthorized, bearer, login

LOGIN = "/api/v1/auth/login"
REFRESH = "/api/v1/auth/refresh"
REVOKE = "/api/v1/auth/revoke"
USERS = "/api/v1/users"


@pytest.fixture()
def user(app):
    return UserFactory(email="saul@bettercall.com")


def test_health(client) -> None:
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "db": "ok", "refresh_backend": "sql"}
    assert resp.headers["X-Request-ID"]


def test_login_returns_token_pair(client, user, session) -> None:
    """A registered user obtains an access and a refresh token."""

    resp = client.post(LOGIN, json={"email": user.email, "password": DEFAULT_PASSWORD})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert set(data) == {"access_token", "refresh_token", "token_type"}
    assert data["token_type"] == "bearer"
    assert len(data["refresh_token"]) == 64

    row = session.get(RefreshToken, data["refresh_token"])
    assert row.subject_id == user.id
    assert row.revoked_at is None


def test_register_then_login(client) -> None:
    payload = {"email": "walt@example.com", "password": "heisenberg"}

    assert client.post(USERS, json=payload).status_code == 201
    data = login(client, **payload)

    assert data["access_token"]


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "saul@bettercall.com", "password": "wrong-password"},
        {"email": "saul@bettercall.com", "password": "x"},
        {"email": "nobody@example.com", "password": DEFAULT_PASSWORD},
    ],
)
def test_login_failures_are_indistinguishable(client, user, payload) -> None:
    assert_unauthorized(client.post(LOGIN, json=payload))


def test_login_validation_error(client) -> None:
    resp = client.post(LOGIN, json={"email": "not-an-email"})

    assert resp.status_code == 422
    errors = resp.get_json()["details"]["errors"]
    assert "email" in errors
    assert "password" in errors


def test_refresh_returns_new_access_token(client, user) -> None:
    tokens = login(client, user.email, DEFAULT_PASSWORD)

    resp = client.post(REFRESH, headers=bearer(tokens["refresh_token"]))

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert set(data) == {"access_token", "token_type"}
    assert data["access_token"] != tokens["access_token"]


def test_refreshed_access_token_authorizes_requests(client, user) -> None:
    tokens = login(client, user.email, DEFAULT_PASSWORD)
    access = client.post(REFRESH, headers=bearer(tokens["refresh_token"])).get_json()["data"][
        "access_token"
    ]

    resp = client.put(
        USERS, json={"email": "saul@goodman.com", "password": "slippin-jimmy"}, headers=bearer(access)
    )
    assert resp.status_code == 200


def test_refresh_with_access_token_is_refused(client, user) -> None:
    tokens = login(client, user.email, DEFAULT_PASSWORD)
    assert_unauthorized(client.post(REFRESH, headers=bearer(tokens["access_token"])))


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Basic abc"},
        {"Authorization": "Bearer"},
        {"Authorization": "Bearer a b"},
        {"Authorization": "Bearer " + "0" * 64},
    ],
)
def test_refresh_bad_header_or_unknown_token(client, headers) -> None:
    assert_unauthorized(client.post(REFRESH, headers=headers))


def test_revoke_then_refresh_is_refused(client, user) -> None:
    tokens = login(client, user.email, DEFAULT_PASSWORD)

    resp = client.post(REVOKE, headers=bearer(tokens["refresh_token"]))
    assert resp.status_code == 204
    assert resp.get_data() == b""

    assert_unauthorized(client.post(REFRESH, headers=bearer(tokens["refresh_token"])))


def test_revoke_is_idempotent_and_silent(client, user, session) -> None:
    tokens = login(client, user.email, DEFAULT_PASSWORD)

    assert client.post(REVOKE, headers=bearer(tokens["refresh_token"])).status_code == 204
    first = session.get(RefreshToken, tokens["refresh_token"]).revoked_at
    assert client.post(REVOKE, headers=bearer(tokens["refresh_token"])).status_code == 204
    session.expire_all()
    assert session.get(RefreshToken, tokens["refresh_token"]).revoked_at == first

    # Unknown values are accepted too
    assert client.post(REVOKE, headers=bearer("f" * 64)).status_code == 204


def test_revoke_without_header(client) -> None:
    assert_unauthorized(client.post(REVOKE))


def test_revoke_keeps_access_token_valid(client, user) -> None:
    tokens = login(client, user.email, DEFAULT_PASSWORD)
    client.post(REVOKE, headers=bearer(tokens["refresh_token"]))

    resp = client.put(
        USERS, json={"email": user.email, "password": "new-password"}, headers=bearer(tokens["access_token"])
    )
    assert resp.status_code == 200


def test_refresh_token_expires_after_sixty_days(client, user) -> None:
    with freeze_time("2026-01-01 00:00:00") as frozen:
        tokens = login(client, user.email, DEFAULT_PASSWORD)

        frozen.tick(timedelta(days=59))
        assert client.post(REFRESH, headers=bearer(tokens["refresh_token"])).status_code == 200

        frozen.tick(timedelta(days=1))
        assert_unauthorized(client.post(REFRESH, headers=bearer(tokens["refresh_token"])))


def test_access_token_expires_after_one_hour(client, user) -> None:
    with freeze_time("2026-01-01 00:00:00") as frozen:
        tokens = login(client, user.email, DEFAULT_PASSWORD)
        frozen.tick(timedelta(hours=1))

        resp = client.put(
            USERS,
            json={"email": user.email, "password": "new-password"},
            headers=bearer(tokens["access_token"]),
        )
    assert_unauthorized(resp)
