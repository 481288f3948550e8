# renomapro/crosscutting/logger.py
"""
===============================================================================
TARJETA CRC: crosscutting/logger.py (logger "renomapro")
===============================================================================

Responsabilidades:
  - Emitir una línea JSON por evento en stdout (LOG_JSON=false: texto plano).
  - Sumar request_id / method / path del request en curso.
  - Ocultar credenciales antes de serializar: passwords, JWT, claves y
    firmas de Stripe, password SMTP. También valores sueltos con forma de
    secreto de Stripe ("sk_live_...", "whsec_...") o de header Bearer.

Colaboradores:
  - renomapro/context.py (ContextVars del request)
  - LOG_LEVEL / LOG_JSON del entorno (el logger existe antes que Settings)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

REDACTED = "***REDACTADO***"

# Atributos propios de logging.LogRecord; el resto llega por `extra=`.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}

_SECRET_VALUE = re.compile(r"^(sk|rk)_(live|test)_\w+$|^whsec_\w+$|^Bearer\s+\S+$")


class _Redactor:
    """Copia "loggeable" de un valor: claves sensibles tapadas, tamaño acotado."""

    SENSITIVE_KEYS = frozenset(
        {
            "password",
            "password_hash",
            "secret",
            "token",
            "authorization",
            "access_token",
            "jwt_secret",
            "stripe_secret_key",
            "stripe_webhook_secret",
            "stripe-signature",
            "smtp_password",
        }
    )

    def __init__(self, max_str: int = 8_000, max_depth: int = 4):
        self._max_str = max_str
        self._max_depth = max_depth

    def sanitize(self, value: Any, *, depth: int = 0, key: str | None = None) -> Any:
        if key and key.lower() in self.SENSITIVE_KEYS:
            return REDACTED
        if depth > self._max_depth:
            return "***TRUNCADO***"

        if isinstance(value, str):
            if _SECRET_VALUE.match(value.strip()):
                return REDACTED
            if len(value) > self._max_str:
                return value[: self._max_str] + "…(truncado)"
            return value
        if isinstance(value, (bytes, bytearray)):
            # Bodies de webhook: solo el tamaño.
            return f"<bytes {len(value)}B>"
        if isinstance(value, dict):
            return {
                str(k): self.sanitize(v, depth=depth + 1, key=str(k))
                for k, v in value.items()
            }
        if isinstance(value, (list, tuple, set)):
            return [self.sanitize(v, depth=depth + 1, key=key) for v in value]
        if isinstance(value, (int, float, bool)) or value is None:
            return value
        return str(value)


class JSONFormatter(logging.Formatter):
    """LogRecord -> JSON con contexto de request y extras redactados."""

    def __init__(self):
        super().__init__()
        self._redactor = _Redactor()

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
            "pid": record.process or os.getpid(),
            **get_context_dict(),
        }

        for attr, value in vars(record).items():
            if attr not in _RECORD_ATTRS:
                payload[attr] = self._redactor.sanitize(value, key=attr)

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stacktrace": traceback.format_exception(exc_type, exc, tb),
            }

        return json.dumps(payload, ensure_ascii=False, default=str, separators=(",", ":"))


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def setup_logger(name: str = "renomapro") -> logging.Logger:
    """Configura el logger de la app una sola vez (reimports no duplican handlers)."""
    log = logging.getLogger(name)
    level = (os.getenv("LOG_LEVEL") or "INFO").upper()
    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if _env_flag("LOG_JSON", True):
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        log.addHandler(handler)

    return log


logger = setup_logger()
