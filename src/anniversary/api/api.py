"""API router configuration."""

from fastapi import APIRouter

from anniversary.api.endpoints import assets, letters, notes, photos

router = APIRouter()
router.include_router(photos.router)
router.include_router(notes.router)
router.include_router(letters.router)
router.include_router(assets.router)
