"""Health check routes."""

from fastapi import APIRouter

from core.configurator import STORAGE_VERSION

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "storage_version": STORAGE_VERSION}
