from fastapi import APIRouter

from .health import router as health_router
from .i18n import router as i18n_router
from .notifications import router as notifications_router
from .preferences import router as preferences_router

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["notifications"])
api_router.include_router(preferences_router, prefix="/preferences", tags=["preferences"])
api_router.include_router(i18n_router, prefix="/i18n", tags=["i18n"])

__all__ = ["api_router"]
