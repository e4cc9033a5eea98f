"""Health check endpoints."""

from fastapi import APIRouter

from ledgerview.core.config import get_settings

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    """Liveness only; the database is not touched."""

    settings = get_settings()
    return {"status": "ok", "service": settings.app_name}
