from fastapi import APIRouter

from app.api.v1.release_notes import router as release_notes_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(release_notes_router)
