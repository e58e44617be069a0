"""
API Version 1 - Route definitions.
"""
from fastapi import APIRouter

from ...config import get_settings
from .billing import router as billing_router


def create_api_router(api_version: str) -> APIRouter:
    """Create the versioned router, e.g. /v1."""
    router = APIRouter(prefix=f"/{api_version}")
    router.include_router(billing_router)
    return router


api_router = create_api_router(get_settings().api_version)

__all__ = ['api_router', 'create_api_router']
