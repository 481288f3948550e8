"""
Name: Auth Routes Tests

Responsibilities:
  - Registro / login / me sobre la API real (TestClient + in-memory repos)
  - Rechazos 401 / 409 / 422 con respuesta RFC7807
"""

import base64
import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from renomapro.identity.auth_users import AuthSettings, create_access_token
from renomapro.identity.users import User, UserRole

pytestmark = pytest.mark.unit


def test_register_returns_token_and_id(client):
    resp = client.post(
        "/api/register",
        json={"name": "Jan", "email": "jan@example.pl", "password": "secret123"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert isinstance(body["id"], int)
    assert body["token"]


def test_register_defaults_to_pro_role(client, register):
    _, headers = register("pro@example.pl")

    me = client.get("/api/me", headers=headers)

    assert me.status_code == 200
    assert me.json()["role"] == "pro"


def test_register_normalizes_email(client, register):
    register("Anna@Example.PL ", role="client")

    resp = client.post(
        "/api/login", json={"email": "anna@example.pl", "password": "secret123"}
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "client"


def test_register_duplicate_email_conflict(client, register):
    register("dup@example.pl")

    resp = client.post(
        "/api/register",
        json={"name": "Otro", "email": "DUP@example.pl", "password": "other-pass"},
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "CONFLICT"


def test_register_rejects_admin_role(client):
    resp = client.post(
        "/api/register",
        json={"email": "evil@example.pl", "password": "secret123", "role": "admin"},
    )

    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_ERROR"


def test_login_returns_role_and_subscription(client, register):
    register("login@example.pl", role="client")

    resp = client.post(
        "/api/login", json={"email": "login@example.pl", "password": "secret123"}
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert body["role"] == "client"
    assert body["subscribed"] is False


def test_login_unknown_email_and_wrong_password_look_the_same(client, register):
    register("known@example.pl")

    unknown = client.post(
        "/api/login", json={"email": "nobody@example.pl", "password": "secret123"}
    )
    wrong = client.post(
        "/api/login", json={"email": "known@example.pl", "password": "bad-pass"}
    )

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json()["detail"] == wrong.json()["detail"]


def test_me_requires_token(client):
    resp = client.get("/api/me")

    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_me_rejects_token_signed_with_another_secret(client):
    user = User(
        id=1,
        name="Jan",
        email="jan@example.pl",
        password_hash="x",
        role=UserRole.PRO,
    )
    forged_settings = AuthSettings(
        jwt_secret="another-secret-with-at-least-32-chars!!",
        jwt_access_ttl_minutes=60,
    )
    token, _ = create_access_token(user, forged_settings)

    resp = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_me_returns_claims(client, register):
    user_id, headers = register("me@example.pl")

    resp = client.get("/api/me", headers=headers)

    assert resp.json() == {"id": user_id, "email": "me@example.pl", "role": "pro"}


PROTECTED_ROUTES = [
    ("get", "/api/me", None),
    ("post", "/api/fachowcy", {"name": "Kowalski"}),
    ("post", "/api/create-checkout-session", None),
    ("get", "/api/owner/stats", None),
]


def _expired_token(user_id, email, role, secret):
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "typ": "access",
            "iat": int((now - timedelta(days=8)).timestamp()),
            "exp": int((now - timedelta(days=1)).timestamp()),
        },
        secret,
        algorithm="HS256",
    )


def _tampered_token(token):
    header, _, signature = token.split(".")
    payload = base64.urlsafe_b64encode(
        json.dumps(
            {"sub": "1", "email": "admin@renomapro.test", "role": "admin", "exp": 9999999999}
        ).encode()
    ).rstrip(b"=").decode()
    return ".".join([header, payload, signature])


@pytest.mark.parametrize("method,path,body", PROTECTED_ROUTES)
def test_expired_token_is_rejected_on_protected_routes(
    client, container, admin_headers, method, path, body
):
    admin = container.credential_store.verify_password("admin@renomapro.test", "admin-pass")
    token = _expired_token(admin.id, admin.email, "admin", container.settings.jwt_secret)

    resp = client.request(
        method.upper(), path, headers={"Authorization": f"Bearer {token}"}, json=body
    )

    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"


@pytest.mark.parametrize("method,path,body", PROTECTED_ROUTES)
def test_tampered_token_is_rejected_on_protected_routes(
    client, register, method, path, body
):
    _, headers = register("pro@example.pl")
    token = headers["Authorization"].removeprefix("Bearer ")

    resp = client.request(
        method.upper(), path, headers={"Authorization": f"Bearer {_tampered_token(token)}"}, json=body
    )

    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"


def test_register_and_login_tokens_verify_independently(client, register):
    user_id, register_headers = register("twice@example.pl")
    first_login = client.post(
        "/api/login", json={"email": "twice@example.pl", "password": "secret123"}
    ).json()["token"]
    second_login = client.post(
        "/api/login", json={"email": "twice@example.pl", "password": "secret123"}
    ).json()["token"]

    for headers in (
        register_headers,
        {"Authorization": f"Bearer {first_login}"},
        {"Authorization": f"Bearer {second_login}"},
    ):
        resp = client.get("/api/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == user_id


def test_failed_login_asks_for_bearer(client):
    resp = client.post("/api/login", json={"email": "x@example.pl", "password": "nope"})

    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"
