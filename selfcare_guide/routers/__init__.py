"""Router package exposing all API routers."""

from fastapi import APIRouter

from .analysis.router import router as analysis_router
from .compendium.router import router as compendium_router

router = APIRouter()
router.include_router(analysis_router)
router.include_router(compendium_router)

__all__ = ["router", "analysis_router", "compendium_router"]
