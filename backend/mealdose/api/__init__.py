from fastapi import APIRouter

from .health import router as health_router
from .insulin import router as insulin_router
from .profiles import router as profiles_router
from .vision import router as vision_router

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(insulin_router, prefix="/insulin", tags=["insulin"])
api_router.include_router(profiles_router, prefix="/profiles", tags=["profiles"])
api_router.include_router(vision_router, prefix="/vision", tags=["vision"])

__all__ = ["api_router"]
