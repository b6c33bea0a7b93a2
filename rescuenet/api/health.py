"""Health check endpoint."""

from fastapi import APIRouter

from rescuenet.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    """Return API health status."""
    return {"status": "ok", "service": settings.app_name}
