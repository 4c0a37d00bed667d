"""Health check endpoints."""
from fastapi import APIRouter
import logging

from ..core.config import settings
from ..core.cache import cache_manager
from ..core.database import health_check_db
from ..services.chat.websocket_manager import websocket_manager

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])

@router.get("/")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

@router.get("/full-health")
async def full_health_check():
    """Comprehensive health check"""
    db_healthy = await health_check_db()
    if not cache_manager.enabled:
        cache_status = "disabled"
    else:
        cache_status = "healthy" if await cache_manager.ping() else "unhealthy"

    health_status = {
        "database": "healthy" if db_healthy else "unhealthy",
        "cache": cache_status,
    }
    overall_status = "healthy" if all(
        status in ("healthy", "disabled") for status in health_status.values()
    ) else "degraded"

    return {
        "status": overall_status,
        "components": health_status,
        "realtime_connections": len(websocket_manager.active_connections),
    }
