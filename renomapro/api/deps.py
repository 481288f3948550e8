"""Dependencias FastAPI compartidas por los routers."""

from __future__ import annotations

from fastapi import Request

from ..container import AppContainer


def get_container(request: Request) -> AppContainer:
    """Container del proceso (armado en el lifespan o inyectado en tests)."""
    return request.app.state.container
