"""Stored image asset endpoints.

Endpoints:
- GET /api/images/assets/{file_id}/content - Serve a stored JPEG
- DELETE /api/images/assets/{file_id} - Delete a stored image
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from teeshot.api.exceptions import ImageNotFoundError
from teeshot.api.response import success_response
from teeshot.services import asset_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images", tags=["Images"])


@router.get("/assets/{file_id}/content")
async def serve_image(file_id: str) -> Response:
    """Serve the binary content of a stored image."""
    result = await asset_store.get_image(file_id)
    if result is None:
        raise ImageNotFoundError(file_id)

    content, media_type, _ = result
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Cache-Control": "public, max-age=86400",  # Cache for 1 day
        },
    )


@router.delete("/assets/{file_id}")
async def delete_image(file_id: str) -> dict:
    if not await asset_store.delete_image(file_id):
        raise ImageNotFoundError(file_id)
    logger.info(f"Deleted image asset {file_id}")
    return success_response({"deleted": True})
