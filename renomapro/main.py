"""Punto de entrada ASGI: `uvicorn renomapro.main:app`."""

from .api.main import app

__all__ = ["app"]
