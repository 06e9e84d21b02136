"""API router that aggregates all routes."""

from fastapi import APIRouter

from hoso.api.routes import admin, browse, health, images, occupations, profiles, tags, upload

api_router = APIRouter(prefix="/api")

# Include route modules
api_router.include_router(health.router)
api_router.include_router(admin.router)
api_router.include_router(profiles.router)
api_router.include_router(tags.router)
api_router.include_router(occupations.router)
api_router.include_router(upload.router)
api_router.include_router(images.router)
api_router.include_router(browse.router)
