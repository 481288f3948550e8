"""
RFC7807 mapping of the error taxonomy (small FastAPI app per test).
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from renomapro.api.exception_handlers import register_exception_handlers
from renomapro.crosscutting.error_responses import PROBLEM_JSON_MEDIA_TYPE
from renomapro.crosscutting.exceptions import (
    BadCredentialError,
    DatabaseError,
    DuplicateEmailError,
    ForbiddenError,
    InvalidCredentialError,
    InvalidSignatureError,
    MissingCredentialError,
    NotFoundError,
    ProviderError,
    ProviderUnavailableError,
)

pytestmark = pytest.mark.unit


def _client_raising(exc: Exception) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise exc

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize(
    "exc,status,code",
    [
        (MissingCredentialError("Falta token Bearer."), 401, "UNAUTHORIZED"),
        (InvalidCredentialError("Token inválido."), 401, "UNAUTHORIZED"),
        (BadCredentialError("x"), 401, "UNAUTHORIZED"),
        (ForbiddenError("Rol insuficiente."), 403, "FORBIDDEN"),
        (NotFoundError("x"), 404, "NOT_FOUND"),
        (DuplicateEmailError("dup"), 409, "CONFLICT"),
        (InvalidSignatureError("Webhook Error: bad sig"), 400, "INVALID_SIGNATURE"),
        (ProviderUnavailableError("no key"), 500, "INTERNAL_ERROR"),
        (ProviderError("sk_live leaked?"), 500, "INTERNAL_ERROR"),
        (DatabaseError("pg down"), 503, "DATABASE_ERROR"),
    ],
)
def test_taxonomy_mapping(exc, status, code):
    resp = _client_raising(exc).get("/boom")

    assert resp.status_code == status
    assert resp.headers["content-type"].startswith(PROBLEM_JSON_MEDIA_TYPE)
    body = resp.json()
    assert body["code"] == code
    assert body["status"] == status


def test_signature_reason_is_exposed():
    resp = _client_raising(InvalidSignatureError("Webhook Error: bad sig")).get("/boom")
    assert resp.json()["detail"] == "Webhook Error: bad sig"


def test_provider_errors_are_generic():
    resp = _client_raising(ProviderError("sk_live_123 rejected")).get("/boom")
    assert "sk_live_123" not in resp.text


def test_unauthorized_sets_www_authenticate():
    resp = _client_raising(MissingCredentialError("Falta token Bearer.")).get("/boom")
    assert resp.headers["www-authenticate"] == "Bearer"


def test_unhandled_exception_is_internal_error():
    resp = _client_raising(RuntimeError("kaboom")).get("/boom")
    assert resp.status_code == 500
    assert resp.json()["code"] == "INTERNAL_ERROR"
    assert resp.json()["detail"] == "Error interno."
    assert "kaboom" not in resp.text


def test_problem_body_carries_type_title_and_error_id():
    body = _client_raising(ForbiddenError("Rol insuficiente.")).get("/boom").json()

    assert body["type"] == "https://renomapro.pl/problems/forbidden"
    assert body["title"] == "Sin permiso"
    assert body["instance"] == "/boom"
    assert "error_id" in body["errors"][0]
