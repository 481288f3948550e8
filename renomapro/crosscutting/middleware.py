# renomapro/crosscutting/middleware.py
"""
===============================================================================
TARJETA CRC: crosscutting/middleware.py (RequestContextMiddleware)
===============================================================================

Responsabilidades:
  - Asignar un request_id: el X-Request-Id entrante si es aceptable, si no uno nuevo.
  - Exponerlo en request.state, en los ContextVars del logger y en la respuesta.
  - Una línea de log por request con status y latencia (/healthz no se loguea).

Colaboradores:
  - renomapro/context.py
  - crosscutting/logger.py
  - api/exception_handlers.py (lee request.state.request_id)
===============================================================================
"""

from __future__ import annotations

import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, set_request_context
from .logger import logger

REQUEST_ID_HEADER = "X-Request-Id"

# Ids de proxies / clientes: imprimibles, sin espacios, acotados.
_ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")

_UNLOGGED_PATHS = frozenset({"/healthz"})


def resolve_request_id(incoming: str | None) -> str:
    candidate = (incoming or "").strip()
    if _ACCEPTED_REQUEST_ID.match(candidate):
        return candidate
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(
            request_id=request_id, method=request.method, path=request.url.path
        )

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            logger.exception("Request abortado", extra={"status_code": status_code})
            raise
        finally:
            if request.url.path not in _UNLOGGED_PATHS:
                logger.info(
                    "Request atendido",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                    },
                )
            clear_context()
