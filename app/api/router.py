from fastapi import APIRouter

from app.api.health import router as health_router
from app.api.images import router as images_router
from app.api.uploads import router as uploads_router

router = APIRouter()
router.include_router(uploads_router)
router.include_router(images_router)
router.include_router(health_router)
