"""API routes for StreamWaves"""

from fastapi import APIRouter

from .health import router as health_router
from .iptv import router as iptv_router

# Create the main API router
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(iptv_router, tags=["IPTV"])

__all__ = ["api_router"]
