"""
AlphaClass FastAPI Application

Role-aware academic scheduling API with an embedded AI assistant.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from alphaclass.config import settings
from alphaclass.core.database import close_db, engine
from alphaclass.core.errors import (
    AlphaClassError,
    InferenceUnavailable,
    InvalidCredential,
    InvalidResource,
    NotFound,
    StoreUnavailable,
    Unauthorized,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[AlphaClassError], int] = {
    InvalidCredential: status.HTTP_401_UNAUTHORIZED,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    InvalidResource: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    InferenceUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def check_secret_configuration() -> None:
    """Refuse to serve outside local development with the default signing key."""
    if not settings.is_local and settings.uses_default_secret:
        raise RuntimeError(
            "JWT_SECRET_KEY is still the development default. "
            "Provide the signing key from the secret store."
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Startup:
    - Validate secret configuration
    - Verify database connection

    Shutdown:
    - Close database connections
    """
    logger.info("AlphaClass API starting...")
    check_secret_configuration()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise

    logger.info("AlphaClass API ready")

    yield

    logger.info("AlphaClass API shutting down...")
    await close_db()
    logger.info("Shutdown complete")


async def handle_domain_error(request: Request, exc: AlphaClassError) -> JSONResponse:
    """Render domain errors as ``{"error": kind, "detail": ..., "retryable": ...}``."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, InvalidCredential) else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed paths, queries and bodies as ``invalid_resource`` (400)."""
    problems = "; ".join(
        f"{'.'.join(map(str, error['loc']))}: {error['msg']}" for error in exc.errors()
    )
    return await handle_domain_error(request, InvalidResource(problems or "Malformed request"))


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="AlphaClass API",
        description="Role-aware academic scheduling with an AI assistant",
        version="0.1.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_local else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AlphaClassError, handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, handle_validation_error  # type: ignore[arg-type]
    )

    # Health check endpoints
    @app.get("/", tags=["Health"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": "AlphaClass API",
            "status": "operational",
            "version": "0.1.0",
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health", tags=["Health"], response_model=None)
    async def health_check() -> JSONResponse:
        """Health check endpoint for load balancers.

        Returns:
            - status: healthy/unhealthy
            - checks: Individual health checks
        """
        checks: dict[str, dict[str, Any]] = {}

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = {"status": "healthy"}
        except Exception as e:
            checks["database"] = {"status": "unhealthy", "error": str(e)}

        # Assistant is optional: without a provider, chat turns fail with a retryable error
        configured = {"anthropic": settings.ANTHROPIC_API_KEY, "grok": settings.GROK_API_KEY}
        providers = [name for name, key in configured.items() if key]
        checks["assistant"] = {
            "status": "healthy" if providers else "degraded",
            "providers": providers,
        }

        all_healthy = checks["database"]["status"] == "healthy"
        status_code = 200 if all_healthy else 503

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if all_healthy else "unhealthy",
                "environment": settings.ENVIRONMENT,
                "checks": checks,
            },
        )

    @app.get("/health/ready", tags=["Health"], response_model=None)
    async def readiness_check() -> dict[str, str] | JSONResponse:
        """Readiness check for Kubernetes.

        Returns 200 when app is ready to serve traffic.
        """
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ready"}
        except Exception:
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready"},
            )

    @app.get("/health/live", tags=["Health"])
    async def liveness_check() -> dict[str, str]:
        """Liveness check for Kubernetes.

        Returns 200 if app is alive (even if not fully functional).
        """
        return {"status": "alive"}

    # Register API routers
    from alphaclass.api.v1 import auth, chat, classes, notifications, schedule

    app.include_router(auth.router, prefix="/api/v1/auth", tags=["Auth"])
    app.include_router(schedule.router, prefix="/api/v1/schedule", tags=["Schedule"])
    app.include_router(classes.router, prefix="/api/v1/classes", tags=["Classes"])
    app.include_router(
        notifications.router, prefix="/api/v1/notifications", tags=["Notifications"]
    )
    app.include_router(chat.router, prefix="/api/v1/chat", tags=["Chat"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "alphaclass.main:app",
        host="0.0.0.0",  # nosec B104 - Intentional for containerized deployment
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
