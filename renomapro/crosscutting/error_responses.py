# renomapro/crosscutting/error_responses.py
"""
===============================================================================
TARJETA CRC: crosscutting/error_responses.py (Problem Details, RFC 7807)
===============================================================================

Responsabilidades:
  - Catálogo de códigos estables que ve el frontend de RenomaPro (ErrorCode).
  - Cuerpo application/problem+json (ErrorDetail) con request_id en `errors`.
  - AppHTTPException: error HTTP ya decidido (status + code + detail).
  - Esquema de errores para OpenAPI compartido por todos los routers.

Colaboradores:
  - api/exception_handlers.py (traduce RenomaError -> AppHTTPException)
  - crosscutting/middleware.py (request.state.request_id)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"
PROBLEM_TYPE_BASE = "https://renomapro.pl/problems/"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


_TITLES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Request inválido",
    ErrorCode.UNAUTHORIZED: "No autenticado",
    ErrorCode.FORBIDDEN: "Sin permiso",
    ErrorCode.NOT_FOUND: "No encontrado",
    ErrorCode.CONFLICT: "Conflicto",
    ErrorCode.INVALID_SIGNATURE: "Webhook rechazado",
    ErrorCode.INTERNAL_ERROR: "Error interno",
    ErrorCode.DATABASE_ERROR: "Base de datos no disponible",
}


class ErrorDetail(BaseModel):
    """Problem Details + `code` estable + `errors` (error_id / request_id / campos)."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


def _openapi_problem(description: str) -> dict[str, Any]:
    return {
        "description": description,
        "model": ErrorDetail,
        "content": {
            PROBLEM_JSON_MEDIA_TYPE: {"schema": {"$ref": "#/components/schemas/ErrorDetail"}}
        },
    }


OPENAPI_ERROR_RESPONSES = {
    "400": _openapi_problem("Firma de webhook inválida"),
    "401": _openapi_problem("Falta token o es inválido"),
    "403": _openapi_problem("Rol o dueño insuficiente"),
    "409": _openapi_problem("Email ya registrado"),
    "422": _openapi_problem("Body inválido"),
    "default": _openapi_problem("Error interno"),
}


class AppHTTPException(HTTPException):
    """HTTPException con ErrorCode y detalles extra para el cuerpo RFC 7807."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.errors = errors


def unauthorized(detail: str = "Autenticación requerida") -> AppHTTPException:
    return AppHTTPException(
        401, ErrorCode.UNAUTHORIZED, detail, headers={"WWW-Authenticate": "Bearer"}
    )


async def app_exception_handler(request: Request, exc: AppHTTPException) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    errors = list(exc.errors or [])
    if request_id:
        errors.append({"request_id": request_id})

    body = ErrorDetail(
        type=PROBLEM_TYPE_BASE + exc.code.value.lower().replace("_", "-"),
        title=_TITLES[exc.code],
        status=exc.status_code,
        detail=str(exc.detail),
        code=exc.code,
        instance=request.url.path,
        errors=errors or None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=exc.headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )
