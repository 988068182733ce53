"""Health check endpoint."""

from fastapi import APIRouter

from teeshot.api.response import success_response
from teeshot.services.session_store import get_session_store

router = APIRouter(tags=["System"])


@router.get("/health")
async def health_check() -> dict:
    """Return system health status and the number of live sessions."""
    return success_response({"status": "ok", "sessions": len(get_session_store())})
