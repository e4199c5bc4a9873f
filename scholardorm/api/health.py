"""Health check endpoint."""

from fastapi import APIRouter

from scholardorm.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "service": "scholardorm-analytics",
        "backend": settings.DATA_BACKEND,
    }
