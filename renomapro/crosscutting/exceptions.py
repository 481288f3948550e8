# renomapro/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable (razón corta y legible por máquinas)
- error_id para correlación con logs
- message “humana” (sin filtrar secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  RenomaError + subclases

Responsabilidades:
  - Estandarizar la taxonomía de errores (identidad, autorización, billing, DB)
  - Generar error_id para rastreo

Colaboradores:
  - api/exception_handlers.py (mapea a respuestas RFC7807)
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class RenomaError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      RenomaError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "RENOMA_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


# -----------------------------------------------------------------------------
# Identidad / autorización
# -----------------------------------------------------------------------------
class MissingCredentialError(RenomaError):
    """No vino header Authorization: Bearer."""

    error_code: str = "MISSING_CREDENTIAL"


class InvalidCredentialError(RenomaError):
    """Token con firma inválida, expirado o sin claims mínimos."""

    error_code: str = "INVALID_CREDENTIAL"


class ForbiddenError(RenomaError):
    """Rol (o propiedad del recurso) insuficiente."""

    error_code: str = "FORBIDDEN"


# -----------------------------------------------------------------------------
# Credential Store
# -----------------------------------------------------------------------------
class DuplicateEmailError(RenomaError):
    error_code: str = "DUPLICATE_EMAIL"


class NotFoundError(RenomaError):
    error_code: str = "NOT_FOUND"


class BadCredentialError(RenomaError):
    """Password no coincide con el hash almacenado."""

    error_code: str = "BAD_CREDENTIAL"


# -----------------------------------------------------------------------------
# Billing (Stripe)
# -----------------------------------------------------------------------------
class InvalidSignatureError(RenomaError):
    """Webhook sin firma válida (o body no parseable)."""

    error_code: str = "INVALID_SIGNATURE"


class ProviderUnavailableError(RenomaError):
    """Billing no configurado (faltan credenciales / price)."""

    error_code: str = "PROVIDER_UNAVAILABLE"


class ProviderError(RenomaError):
    """Falla de la llamada externa al proveedor de pagos."""

    error_code: str = "PROVIDER_ERROR"


# -----------------------------------------------------------------------------
# Infraestructura
# -----------------------------------------------------------------------------
class DatabaseError(RenomaError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"
