"""Router package exposing all API routers."""

from fastapi import APIRouter

from .studio.router import router as stylist_router

router = APIRouter()
router.include_router(stylist_router)

__all__ = ["router", "stylist_router"]
