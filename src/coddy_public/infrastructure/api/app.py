"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from coddy_public.core.config import Settings, get_settings
from coddy_public.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from coddy_public.infrastructure.api.middleware import (
    ContentValidationMiddleware,
    SecurityHeadersMiddleware,
)
from coddy_public.infrastructure.api.responses import error_response
from coddy_public.infrastructure.persistence.database import (
    close_database,
    init_database,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and the database on startup and releases the
    database engine on shutdown.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting Coddy public backend",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down Coddy public backend")
    await close_database()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Public authentication backend for Coddy",
        debug=settings.debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(ContentValidationMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_health_check(app, settings)
    register_routes(app, settings)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI, settings: Settings) -> None:
    """Register health check and service info endpoints."""

    @app.get(f"{settings.api_prefix}/health", tags=["health"])
    async def health_check():
        """Returns 200 if the service is running."""
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": settings.app_name,
        }

    @app.get("/", tags=["health"])
    async def service_info():
        return {
            "status": "OK",
            "message": "Coddy NonLogin Backend",
            "info": f"Use {settings.api_prefix}/health for a quick health check "
            f"or {settings.api_prefix}/auth/* for authentication",
            "environment": settings.environment,
        }


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes."""
    from coddy_public.infrastructure.api.routes import auth_router

    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    All errors are rendered in the standard error envelope.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part != "body"]
            field = ".".join(loc) or "body"
            if error.get("type") in {"missing", "string_too_short"}:
                errors.append(f"Missing required field: {field}")
            elif error.get("type") == "json_invalid":
                errors.append("Request body is not valid JSON")
            else:
                errors.append(f"Invalid value for field: {field}")
        return error_response(400, "Validation failed", errors=errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(
                404,
                "Endpoint not found",
                path=request.url.path,
                method=request.method,
            )
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        if get_settings().is_development:
            return error_response(
                500,
                str(exc) or "Internal Server Error",
                stack="".join(traceback.format_exception(exc)),
            )
        return error_response(500, "An error occurred. Please try again later.")


def register_middleware(app: FastAPI) -> None:
    """Register request logging with correlation IDs."""

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or new_correlation_id()
        bind_correlation_id(correlation_id)

        logger.info("Request started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


# Create the application instance
app = create_app()
