"""
FastAPI application factory.

Run with:
    uvicorn rolegate.main:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rolegate.core.config import Settings, get_settings
from rolegate.core.exceptions import (
    RoleGateError,
    AuthenticationError,
    InfrastructureError,
)
from rolegate.core.gate import RoleGate
from rolegate.core.logging import setup_logging
from rolegate.api.middleware import RequestContextMiddleware
from rolegate.api.routes import router as api_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    gate: RoleGate = app.state.gate

    # Startup: schema, indexes, pending migrations. Failure aborts startup.
    await gate.startup()

    yield

    # Shutdown
    await gate.close()


def create_app(
    gate: RoleGate | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or (gate.settings if gate else get_settings())
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.gate = gate or RoleGate.from_settings(settings)

    # Middleware
    app.add_middleware(RequestContextMiddleware)

    # Routes
    app.include_router(api_router)

    # Exception handlers
    @app.exception_handler(RoleGateError)
    async def rolegate_exception_handler(request: Request, exc: RoleGateError):
        """Map the exception hierarchy to 401/403/503 responses."""
        message = exc.message
        if isinstance(exc, InfrastructureError):
            logger.error("infrastructure_error", error_code=exc.error_code, error=exc.message)
            message = InfrastructureError.default_message

        response = JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, "message": message},
        )
        if isinstance(exc, AuthenticationError) and exc.clear_cookie:
            response.delete_cookie(exc.clear_cookie, path="/")
        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("unhandled_error", error=str(exc))
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    # Health check
    @app.get("/health")
    async def health_check():
        """Quick health check endpoint (for load balancers)."""
        active_gate: RoleGate = app.state.gate
        cache_ok = await active_gate.cache.ping()
        return JSONResponse(
            status_code=200 if cache_ok else 503,
            content={
                "status": "healthy" if cache_ok else "degraded",
                "version": settings.app_version,
                "migrations": active_gate.migrations.state.value,
            },
        )

    return app


if __name__ == "__main__":
    import uvicorn

    config = get_settings()
    uvicorn.run(
        "rolegate.main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
    )
