"""
Mail Subscription API Server

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from typing import Literal

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from mailsub.core.config import Settings, get_settings
from mailsub.core.database import check_db, engine, init_db
from mailsub.core.logging_config import configure_logging
from mailsub.core.metrics import metrics
from mailsub.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from mailsub.core.observability import clear_hooks, log_hook, make_metrics_hook, register_hook
from mailsub.api.v1 import router as api_v1_router
from mailsub_shared.schemas.common import ErrorBody, ErrorResponse

log = structlog.get_logger()


def _store_unavailable(message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code="STORE_UNAVAILABLE", message=message, status=503))
    return JSONResponse(status_code=503, content=body.model_dump())


def install_hooks(settings: Settings) -> None:
    """Register the policy observability hooks for this process."""
    clear_hooks()
    register_hook(log_hook)
    if settings.metrics_enabled:
        register_hook(make_metrics_hook(metrics))


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    install_hooks(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("mailsub.starting", create_tables=settings.create_tables_on_startup)
        if settings.create_tables_on_startup:
            await init_db()
        yield
        log.info("mailsub.shutting_down")
        await engine.dispose()

    app = FastAPI(
        title="Mail Subscriptions",
        description="Mail subscriptions per category/subcategory and verification tokens.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware (last added is outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def store_unavailable_handler(request: Request, exc: Exception):
        log.error("store.unavailable", path=request.url.path, error=str(exc))
        return _store_unavailable("The subscription store is unavailable.")

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check: the store must answer a trivial query."""
        try:
            await check_db()
        except (OperationalError, InterfaceError, OSError) as exc:
            log.warning("store.not_ready", error=str(exc))
            return _store_unavailable("The subscription store is not reachable.")
        return {"status": "ready"}

    @app.get("/metrics", tags=["System"], response_class=PlainTextResponse)
    async def metrics_endpoint(format: Literal["prometheus", "json"] = Query("prometheus")):
        """Policy metrics as Prometheus text, or as JSON with ``?format=json``."""
        if not settings.metrics_enabled:
            return PlainTextResponse("metrics disabled\n", status_code=404)
        if format == "json":
            return JSONResponse(metrics.to_dict())
        return PlainTextResponse(metrics.to_prometheus())

    return app


app = create_app()
