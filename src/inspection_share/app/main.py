"""Application factory for the inspection share API.

Usage:
    # Local development (in-memory store)
    from inspection_share.app import create_app, AppSettings
    app = create_app(AppSettings())

    # Deployed (Supabase store, settings from the environment)
    app = create_app(AppSettings.from_env())

    # Tests (full DI control)
    app = create_app(settings, inspection_repo=repo, token_verifier=verifier)

For uvicorn use the factory flag so nothing runs at import time:
    uvicorn inspection_share.app.main:create_app --factory
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .db import SupabaseClient, SupabaseError, SupabaseInspectionRepository
from .db.supabase_client import close_shared_async_client
from .inmemory import InMemoryInspectionRepository
from .observability import configure_logging, get_logger, metrics_text
from .observability.middleware import (
    MetricsMiddleware,
    RequestIdMiddleware,
    RequestLoggingMiddleware,
)
from .protocols import InspectionRepository
from .security import AuthGuardMiddleware, TokenVerifier, create_token_verifier
from .settings import AppSettings
from .sharing import (
    ShareLinkService,
    create_share_router,
    create_shared_inspection_router,
)

logger = get_logger(__name__)

INTERNAL_ERROR_BODY = {"error": "Internal server error"}


def _build_repository(settings: AppSettings) -> InspectionRepository:
    if settings.is_local and not settings.supabase_service_role_key:
        return InMemoryInspectionRepository()
    client = SupabaseClient(
        supabase_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
        timeout_seconds=settings.store_timeout_seconds,
    )
    return SupabaseInspectionRepository(client)


def _build_verifier(settings: AppSettings) -> TokenVerifier | None:
    if not settings.supabase_url and not settings.supabase_jwt_secret:
        return None
    return create_token_verifier(
        supabase_url=settings.supabase_url or None,
        jwt_secret=settings.supabase_jwt_secret or None,
    )


def create_app(
    settings: AppSettings | None = None,
    *,
    inspection_repo: InspectionRepository | None = None,
    token_verifier: TokenVerifier | None = None,
) -> FastAPI:
    """Create a configured FastAPI application.

    Args:
        settings: Application settings. Defaults to local-dev settings.
        inspection_repo: Store override. When None, local mode without a
            service-role key gets the in-memory store, anything else the
            Supabase repository.
        token_verifier: Access-token verifier override. When None it is
            derived from the Supabase URL / JWT secret; with neither set,
            every owner request answers 401.

    Raises:
        ValueError: If settings validation fails.
    """
    if settings is None:
        settings = AppSettings()

    errors = settings.validate()
    if errors:
        raise ValueError(
            "Settings validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )

    configure_logging(level=settings.log_level, json_output=settings.log_json)

    repo = inspection_repo if inspection_repo is not None else _build_repository(settings)
    verifier = token_verifier if token_verifier is not None else _build_verifier(settings)
    if verifier is None:
        logger.warning("auth_unconfigured", detail="owner routes will answer 401")

    service = ShareLinkService(repo, public_base_url=settings.public_base_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("app_startup", environment=settings.environment)
        yield
        await close_shared_async_client()
        logger.info("app_shutdown")

    app = FastAPI(
        title="Inspection Share API",
        description="Share links granting read-only access to property inspections",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.inspection_repo = repo
    app.state.share_service = service

    # ── Middleware (last added runs first) ──────────────────────
    # Order of execution: RequestID -> Metrics -> RequestLogging -> AuthGuard -> CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(AuthGuardMiddleware, token_verifier=verifier)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ── Error handlers ──────────────────────────────────────────

    @app.exception_handler(SupabaseError)
    async def store_error_handler(request: Request, exc: SupabaseError):
        logger.error(
            "store_request_failed",
            path=request.url.path,
            status_code=exc.status_code,
            code=exc.code,
            message=exc.message,
        )
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)

    # ── Routes ──────────────────────────────────────────────────

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    @app.get("/metrics")
    async def metrics():
        body, content_type = metrics_text()
        return Response(content=body, media_type=content_type)

    app.include_router(create_share_router(service))
    app.include_router(create_shared_inspection_router(service))

    return app
