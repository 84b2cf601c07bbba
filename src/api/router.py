"""Main API router: mounts all sub-routers under /api/v1."""

from fastapi import APIRouter

from src.api.health import router as health_router
from src.api.verification import router as verification_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router)
api_router.include_router(verification_router)
