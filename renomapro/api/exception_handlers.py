"""
===============================================================================
TARJETA CRC — api/exception_handlers.py (Manejo Centralizado de Excepciones)
===============================================================================

Responsabilidades:
  - Traducir la taxonomía RenomaError a respuestas HTTP RFC7807.
  - Centralizar logging de errores con request_id + error_id.
  - No filtrar detalles internos (errores del proveedor de pagos / no tipados).

Tabla de mapeo:
  MissingCredential / InvalidCredential / BadCredential -> 401 UNAUTHORIZED
  Forbidden                                             -> 403 FORBIDDEN
  NotFound                                              -> 404 NOT_FOUND
  DuplicateEmail                                        -> 409 CONFLICT
  InvalidSignature                                      -> 400 INVALID_SIGNATURE
  ProviderUnavailable / ProviderError                   -> 500 INTERNAL_ERROR
  DatabaseError                                         -> 503 DATABASE_ERROR
  resto                                                 -> 500 INTERNAL_ERROR

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: RenomaError y derivadas
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
)
from ..crosscutting.exceptions import (
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
    RenomaError,
)
from ..crosscutting.logger import logger

GENERIC_INTERNAL_DETAIL = "Error interno."

# (status, code, exponer el mensaje al cliente)
_MAPPING: tuple[tuple[type[RenomaError], int, ErrorCode, bool], ...] = (
    (MissingCredentialError, 401, ErrorCode.UNAUTHORIZED, True),
    (InvalidCredentialError, 401, ErrorCode.UNAUTHORIZED, True),
    (BadCredentialError, 401, ErrorCode.UNAUTHORIZED, True),
    (ForbiddenError, 403, ErrorCode.FORBIDDEN, True),
    (NotFoundError, 404, ErrorCode.NOT_FOUND, True),
    (DuplicateEmailError, 409, ErrorCode.CONFLICT, True),
    (InvalidSignatureError, 400, ErrorCode.INVALID_SIGNATURE, True),
    (ProviderUnavailableError, 500, ErrorCode.INTERNAL_ERROR, False),
    (ProviderError, 500, ErrorCode.INTERNAL_ERROR, False),
    (DatabaseError, 503, ErrorCode.DATABASE_ERROR, False),
)


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _resolve(exc: RenomaError) -> tuple[int, ErrorCode, bool]:
    for exc_type, status_code, code, expose in _MAPPING:
        if isinstance(exc, exc_type):
            return status_code, code, expose
    return 500, ErrorCode.INTERNAL_ERROR, False


async def renoma_error_handler(request: Request, exc: RenomaError) -> JSONResponse:
    status_code, code, expose = _resolve(exc)
    request_id = _request_id_from(request)

    log_extra = {
        "code": code.value,
        "error_code": exc.error_code,
        "error_id": exc.error_id,
        "detail": exc.message,
        "request_id": request_id,
    }
    if status_code >= 500:
        logger.error("Error de servicio", extra=log_extra)
    else:
        logger.info("Request rechazado", extra=log_extra)

    if expose:
        detail = exc.message
    elif code == ErrorCode.DATABASE_ERROR:
        detail = "Falla en operación de base de datos"
    else:
        detail = GENERIC_INTERNAL_DETAIL

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=detail,
        errors=[{"error_id": exc.error_id}],
        headers={"WWW-Authenticate": "Bearer"} if status_code == 401 else None,
    )
    return await app_exception_handler(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    app_exc = AppHTTPException(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Request inválido.",
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica en todos los entornos (el detalle queda en el log).
    """
    request_id = _request_id_from(request)
    logger.error(
        "Excepción no controlada",
        exc_info=exc,
        extra={"request_id": request_id, "error": str(exc)},
    )

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=GENERIC_INTERNAL_DETAIL,
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Exception genérica se registra al final como fallback.
    """
    app.add_exception_handler(RenomaError, renoma_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
