"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from vidtube.core.config import Settings, get_settings
from vidtube.core.exceptions import AppError
from vidtube.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from vidtube.infrastructure.auth import JWTService
from vidtube.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)
from vidtube.infrastructure.storage import create_media_store

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings: Settings = app.state.settings

    # Configure logging
    configure_logging(settings)

    logger.info(
        "Starting VidTube",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Local media and staged uploads
    for directory in (settings.storage_path, settings.upload_tmp_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)
    logger.info(
        "Media directories created",
        storage_path=settings.storage_path,
        upload_tmp_dir=settings.upload_tmp_dir,
    )

    # Initialize database
    try:
        await init_database(settings)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down VidTube")
    await close_database()
    logger.info("Database connection closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with. Defaults to the cached environment settings.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="User accounts and sessions for the VidTube video platform",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Shared, request-independent collaborators
    app.state.settings = settings
    app.state.jwt_service = JWTService(settings)
    app.state.media_store = create_media_store(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_media(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """
    settings: Settings = app.state.settings

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint.

        Returns 200 if the service is running. Does not check
        database connectivity or other dependencies.
        """
        return {
            "status": "healthy",
            "service": "VidTube",
            "version": settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check endpoint, including database connectivity."""
        db = get_db_manager(settings)
        if await db.check_connection():
            return {
                "status": "ready",
                "service": "VidTube",
                "version": settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": "VidTube",
                "database": "disconnected",
            },
        )

    @app.get("/live", tags=["health"])
    async def liveness_check():
        return {
            "status": "alive",
            "service": "VidTube",
            "version": settings.app_version,
        }


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from vidtube.infrastructure.api.routes import users_router

    settings: Settings = app.state.settings

    app.include_router(users_router, prefix=f"{settings.api_prefix}/users", tags=["users"])

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        """API root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }


def register_media(app: FastAPI) -> None:
    """Serve locally stored media when the local provider is active."""
    settings: Settings = app.state.settings
    if settings.media_provider != "local":
        return
    app.mount(
        settings.media_url_path,
        StaticFiles(directory=settings.storage_path, check_dir=False),
        name="media",
    )


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: list[dict] | None = None,
) -> JSONResponse:
    """Render the uniform error envelope."""
    content = {
        "success": False,
        "error": error,
        "message": message,
        "status": status_code,
    }
    if details:
        content["details"] = details
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
    """
    settings: Settings = app.state.settings

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Render expected application errors."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "Request failed",
            path=str(request.url.path),
            method=request.method,
            error=exc.error,
            status_code=exc.status_code,
            message=exc.message,
        )
        return error_response(exc.status_code, exc.error, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Render malformed requests as 400 ValidationError."""
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
                "code": error["type"],
            }
            for error in exc.errors()
        ]
        logger.info(
            "Request validation failed",
            path=str(request.url.path),
            method=request.method,
            error_count=len(details),
        )
        return error_response(400, "ValidationError", "Invalid request", details)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return error_response(
            500,
            "InternalError",
            str(exc) if settings.debug else "An unexpected error occurred",
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log each request and bind a correlation ID to the logging context."""
        correlation_id = request.headers.get("X-Correlation-ID") or new_correlation_id()
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            # Clear context to prevent leakage
            clear_context()


# Create the application instance
app = create_app()
