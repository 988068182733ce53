"""Session endpoints: render, export and image generation.

Endpoints:
- GET /api/sessions/{session_id} - Session content and image statuses
- DELETE /api/sessions/{session_id} - Discard a session
- GET /api/sessions/{session_id}/render - Render descriptors
- GET /api/sessions/{session_id}/export - Spreadsheet row and TSV line
- GET /api/sessions/{session_id}/images - Image prompts and statuses
- POST /api/sessions/{session_id}/images - Generate one image
- POST /api/sessions/{session_id}/images/generate-all - Generate every missing image
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Query

from teeshot.api.exceptions import SessionNotFoundError, ValidationError
from teeshot.api.response import success_response
from teeshot.content import normalize_prompt
from teeshot.models import (
    ContentSession,
    ImageEntry,
    ImageGenerateRequest,
    ImageListResponse,
    RenderResponse,
)
from teeshot.services import image_service, session_store
from teeshot.services.presentation import export_view, parse_view, session_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


async def _require_session(session_id: str) -> ContentSession:
    session = await session_store.get_session(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    return session


def _image_list(session: ContentSession, prompts: list[str]) -> ImageListResponse:
    return ImageListResponse(
        session_id=session.session_id,
        images=[ImageEntry(prompt=p, status=session.images.get(p)) for p in prompts],
    )


@router.get("/{session_id}")
async def get_session(session_id: str) -> dict:
    session = await _require_session(session_id)
    return success_response(session_view(session, image_service.session_image_prompts(session)))


@router.delete("/{session_id}")
async def delete_session(session_id: str) -> dict:
    if not await session_store.delete_session(session_id):
        raise SessionNotFoundError(session_id)
    return success_response({"deleted": True})


@router.get("/{session_id}/render")
async def render_session(
    session_id: str,
    keyword: Annotated[Optional[str], Query(description="Keyword highlighted in titles")] = None,
) -> dict:
    """Render descriptors for the session content.

    Image slots reflect the session's current image statuses. The keyword
    defaults to the one from the generation request.
    """
    session = await _require_session(session_id)
    view = parse_view(
        session.generated.content,
        keyword=keyword if keyword is not None else session.keyword,
        citations=session.generated.sources,
        statuses=session.images,
        fmt=session.format,
    )
    return success_response(
        RenderResponse(session_id=session.session_id, format=view.format, descriptors=view.descriptors)
    )


@router.get("/{session_id}/export")
async def export_session(session_id: str) -> dict:
    """Spreadsheet row for the session; only durable image URLs are exported."""
    session = await _require_session(session_id)
    view = export_view(
        session.generated.content,
        statuses=session.images,
        category=session.category,
        citations=session.generated.sources,
        fmt=session.format,
    )
    return success_response(view)


@router.get("/{session_id}/images")
async def list_images(session_id: str) -> dict:
    session = await _require_session(session_id)
    return success_response(_image_list(session, image_service.session_image_prompts(session)))


@router.post("/{session_id}/images")
async def generate_image(session_id: str, request: ImageGenerateRequest) -> dict:
    """Generate (or retry) the image for one prompt of the session.

    Returns:
        {data: ImageEntry, error: null}; a failed generation is reported in
        the entry's status, not as an error envelope.
    """
    session = await _require_session(session_id)
    prompt = normalize_prompt(request.prompt)
    if prompt not in image_service.session_image_prompts(session):
        raise ValidationError(f"Prompt is not part of session '{session_id}'")

    status = await image_service.generate_image(session, prompt)
    return success_response(ImageEntry(prompt=prompt, status=status))


@router.post("/{session_id}/images/generate-all")
async def generate_all_images(session_id: str) -> dict:
    """Generate every image that is not ready yet, one after another."""
    session = await _require_session(session_id)
    statuses = await image_service.generate_all_images(session)
    logger.info(
        f"Batch image generation finished for {len(statuses)} prompts",
        extra={"session_id": session_id},
    )
    return success_response(_image_list(session, list(statuses)))
