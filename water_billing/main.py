"""
FastAPI application entry point for the water billing service.

Exposes:
- Bill calculation with diagnostics
- Bulk meter difference billing
- Tariff lookup
"""
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import JSONResponse

from .config import get_settings
from .domain.exceptions import (
    DomainException,
    EntityNotFoundException,
    ValidationException,
)

settings = get_settings()

LOG_FORMATS = {
    'text': "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    'json': '{"time": "%(asctime)s", "logger": "%(name)s", "level": "%(levelname)s", "message": "%(message)s"}',
}


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMATS.get(settings.log_format, LOG_FORMATS['text']),
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Loads the tariff store at startup so a bad tariffs file fails fast.
    """
    from .api.dependencies import get_tariff_repository

    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    logger.info("Environment: %s", settings.environment)

    repository = get_tariff_repository()
    logger.info("Tariff store ready with %d tariffs", len(repository))

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Water and sewerage billing API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Register exception handlers
    register_exception_handlers(app)

    # Register routes
    register_routes(app)

    return app


# Exception class -> HTTP status
EXCEPTION_STATUS_CODES = (
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (ValidationException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DomainException, status.HTTP_400_BAD_REQUEST),
)


def _domain_error_handler(status_code: int):
    async def handler(request: Request, exc: DomainException) -> JSONResponse:
        logger.info("%s %s -> %s %s", request.method, request.url.path, status_code, exc.code)
        return JSONResponse(status_code=status_code, content=exc.to_dict())
    return handler


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to JSON error responses."""
    for exc_class, status_code in EXCEPTION_STATUS_CODES:
        app.add_exception_handler(exc_class, _domain_error_handler(status_code))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {
            'error': 'INTERNAL_ERROR',
            'message': str(exc) if settings.debug else 'An internal error occurred',
        }
        if settings.debug:
            content['type'] = type(exc).__name__
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_routes(app: FastAPI) -> None:
    """Register API routes."""

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Check application health."""
        return {
            'status': 'healthy',
            'version': settings.app_version,
            'environment': settings.environment,
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            'name': settings.app_name,
            'version': settings.app_version,
            'api_docs': '/docs' if settings.debug else None,
        }

    from .api.v1 import api_router

    # Mount API under /api prefix
    main_router = APIRouter(prefix=settings.api_prefix)
    main_router.include_router(api_router)

    app.include_router(main_router)


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "water_billing.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=settings.workers,
    )
