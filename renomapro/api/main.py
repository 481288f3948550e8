"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Build the FastAPI application (create_app) with metadata and lifespan
  - Configure middleware (CORS, request context)
  - Mount the auth, directory, leads, opinions, admin and billing routers
  - Expose the /healthz liveness endpoint

Collaborators:
  - container.build_container: explicit dependency graph on app.state.container
  - infrastructure.db.pool: init/close the PostgreSQL pool (not in test mode)
  - application.dev_seed_admin.ensure_dev_admin
  - exception_handlers.register_exception_handlers (RFC7807)

Notes:
  - Middleware order matters: RequestContext -> CORS -> routes
  - Tests pass a prebuilt container; the lifespan then skips pool and seeding
  - Env validation happens at startup (lifespan), not at import time
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..application.dev_seed_admin import ensure_dev_admin
from ..container import AppContainer, build_container
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import RequestContextMiddleware
from ..infrastructure.db.pool import close_pool, init_pool
from .admin_routes import router as admin_router
from .auth_routes import router as auth_router
from .billing_routes import router as billing_router
from .exception_handlers import register_exception_handlers
from .lead_routes import router as lead_router
from .opinion_routes import router as opinion_router
from .provider_routes import router as provider_router


def _make_lifespan(prebuilt: AppContainer | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle. Validates settings and initializes pool."""
        if prebuilt is not None:
            app.state.container = prebuilt
            yield
            return

        settings = get_settings()
        uses_pool = not settings.is_test()
        if uses_pool:
            init_pool(
                database_url=settings.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                statement_timeout_ms=settings.db_statement_timeout_ms,
            )

        try:
            container = build_container(settings)
            app.state.container = container
            ensure_dev_admin(settings, store=container.credential_store)

            logger.info(
                "RenomaPro API starting up",
                extra={
                    "app_env": settings.app_env,
                    "billing_configured": container.billing.is_configured(),
                    "mail_configured": container.mailer.is_configured(),
                    "ownership_enforced": settings.provider_ownership_enforced,
                    "db_pool_min": settings.db_pool_min_size,
                    "db_pool_max": settings.db_pool_max_size,
                },
            )
            if not settings.stripe_webhook_secret and settings.stripe_webhook_allow_unsigned:
                logger.warning("Webhooks sin firma habilitados (modo inseguro)")
            yield
        finally:
            if uses_pool:
                close_pool()
            logger.info("RenomaPro API shutting down")

    return lifespan


def _cors_settings(settings: Settings | None) -> tuple[list[str], bool]:
    if settings is not None:
        return settings.get_allowed_origins_list(), settings.cors_allow_credentials
    try:
        current = get_settings()
    except Exception:
        # Fallback for tests that don't set env vars
        return ["http://localhost:3000"], False
    return current.get_allowed_origins_list(), current.cors_allow_credentials


def create_app(container: AppContainer | None = None) -> FastAPI:
    """App factory. `container` permite inyectar dependencias en tests."""
    app = FastAPI(
        title="RenomaPro API",
        version="0.1.0",
        lifespan=_make_lifespan(container),
        openapi_tags=[
            {"name": "auth", "description": "Registro, login y JWT"},
            {"name": "fachowcy", "description": "Directorio de fachowcy"},
            {"name": "leads", "description": "Consultas de clientes"},
            {"name": "opinions", "description": "Opiniones de clientes"},
            {"name": "admin", "description": "Paneles admin / owner"},
            {"name": "billing", "description": "Suscripción (Stripe)"},
        ],
    )
    if container is not None:
        # R: disponible aun sin ejecutar el lifespan (TestClient sin context manager).
        app.state.container = container

    # R: Middleware order (bottom = first to execute)
    app.add_middleware(RequestContextMiddleware)

    origins, allow_credentials = _cors_settings(container.settings if container else None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "Stripe-Signature",
            "X-Request-Id",
        ],
    )

    app.include_router(auth_router)
    app.include_router(provider_router)
    app.include_router(lead_router)
    app.include_router(opinion_router)
    app.include_router(admin_router)
    app.include_router(billing_router)

    register_exception_handlers(app)

    @app.get("/healthz", tags=["health"])
    def healthz(request: Request):
        return {
            "ok": True,
            "request_id": getattr(request.state, "request_id", None),
        }

    return app


app = create_app()
