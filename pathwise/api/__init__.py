"""
REST API Layer for PathWise Coach.

Provides:
- FastAPI application with CORS middleware
- Bearer auth gate (tokens are forwarded to the PathWise backend)
- Coach session endpoints under the /api/v1 prefix
- Goal projection and simulation passthrough
- Health check and Prometheus /metrics
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Awaitable, Callable

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from pathwise.api.routes import router
from pathwise.api.schemas import error_response
from pathwise.config.settings import Settings, get_settings
from pathwise.infra.monitoring import PrometheusMetrics, record_request
from pathwise.lib.errors import (
    AUTH_REQUIRED,
    INTERNAL_ERROR,
    REQUEST_IN_FLIGHT,
    SERVICE_UNAVAILABLE,
    VALIDATION_ERROR,
)
from pathwise.lib.exceptions import RequestInFlightError, ServiceError, ValidationError
from pathwise.lib.logging import clear_session
from pathwise.modules.goal_wizard import GoalWizardModule
from pathwise.services.backend import BackendClient
from pathwise.services.coach_client import CoachClient
from pathwise.services.coach_session import CoachSessionRegistry
from pathwise.services.goal_service import GoalServiceClient
from pathwise.services.redis_service import get_redis_service
from pathwise.services.state_store import get_state_store
from pathwise.services.transcript import RedisTranscriptStore

logger = logging.getLogger(__name__)

_ALLOWED_HEADERS: list[str] = [
    "Authorization",
    "Content-Type",
    "Accept",
    "Accept-Language",
    "X-Request-ID",
]

# Paths that do NOT require a bearer token
_PUBLIC_PATHS: frozenset[str] = frozenset({
    "/health",
    "/api/v1/health",
    "/metrics",
    "/docs",
    "/redoc",
    "/openapi.json",
})


async def _auth_gate_dispatch(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Deny requests without a bearer token unless the path is public."""
    # CORS preflight (OPTIONS) must pass through
    if request.method == "OPTIONS":
        return await call_next(request)
    path = request.url.path.rstrip("/") or "/"
    if path not in _PUBLIC_PATHS:
        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer ") or not auth_header[7:].strip():
            return JSONResponse(
                status_code=401,
                content=error_response(AUTH_REQUIRED),
                headers={"WWW-Authenticate": "Bearer"},
            )
    return await call_next(request)


async def _metrics_dispatch(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Record request count and latency per route template."""
    start = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        clear_session()
    route = request.scope.get("route")
    endpoint = getattr(route, "path", "unmatched")
    record_request(request.method, endpoint, response.status_code, time.perf_counter() - start)
    return response


def build_registry(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[CoachSessionRegistry, BackendClient]:
    """
    Wire the production coach services.

    Args:
        settings: Application settings
        transport: Optional HTTP transport for the backend client

    Returns:
        The session registry and the backend client it shares
    """
    backend = BackendClient.from_settings(settings, transport=transport)
    redis_service = get_redis_service()
    registry = CoachSessionRegistry(
        settings=settings,
        goal_service=GoalServiceClient(backend),
        coach=CoachClient(backend),
        transcript_store=RedisTranscriptStore(redis_service),
        wizard=GoalWizardModule(
            state_store=get_state_store(default_ttl=settings.wizard_ttl),
            ttl=settings.wizard_ttl,
            currency=settings.currency,
        ),
    )
    return registry, backend


def create_app(
    settings: Settings | None = None,
    registry: CoachSessionRegistry | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Includes:
    - CORS middleware with origins from PATHWISE_CORS_ORIGINS
    - Catch-all auth gate (deny requests without a bearer token)
    - Exception handlers mapping coach errors to the error envelope
    - API v1 router
    - Root-level health check and /metrics
    - Production: /docs and /redoc disabled

    Args:
        settings: Settings (read from the environment if None)
        registry: Prebuilt session registry (built from settings if None)
        transport: HTTP transport for the backend client when the
            registry is built here

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    backend: BackendClient | None = None
    if registry is None:
        registry, backend = build_registry(settings, transport=transport)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if backend is not None:
            await backend.aclose()
            await get_redis_service().close()
        logger.info("pathwise_api_stopped")

    app = FastAPI(
        title="PathWise Coach",
        description="Conversational coach for personal financial goals",
        version="0.1.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry

    # -------------------------------------------------------------------------
    # Exception handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(RequestInFlightError)
    async def in_flight_handler(request: Request, exc: RequestInFlightError) -> JSONResponse:
        return JSONResponse(status_code=409, content=error_response(REQUEST_IN_FLIGHT))

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        logger.warning("backend_call_failed path=%s status=%s", request.url.path, exc.status_code)
        return JSONResponse(
            status_code=502,
            content=error_response(SERVICE_UNAVAILABLE, message=exc.message),
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_response(VALIDATION_ERROR, message=str(exc)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_response(VALIDATION_ERROR, details={"errors": len(exc.errors())}),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path,
        )
        return JSONResponse(status_code=500, content=error_response(INTERNAL_ERROR))

    # -------------------------------------------------------------------------
    # Middleware (last added runs first)
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=_ALLOWED_HEADERS,
    )

    if settings.cors_origins:
        logger.info("CORS enabled for origins: %s", settings.cors_origins)
    else:
        logger.info("CORS: no origins configured (restrictive default)")

    app.add_middleware(BaseHTTPMiddleware, dispatch=_auth_gate_dispatch)
    app.add_middleware(BaseHTTPMiddleware, dispatch=_metrics_dispatch)

    app.include_router(router)

    @app.get("/health")
    async def root_health_check() -> dict[str, str]:
        """Root health check for load balancers."""
        return {"status": "ok"}

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(
            content=PrometheusMetrics.generate_metrics(),
            media_type=PrometheusMetrics.content_type,
        )

    return app


__all__ = ["create_app", "build_registry", "router"]
