"""Content generation and stateless parsing endpoints.

Endpoints:
- POST /api/content/generate - Generate content and open a session
- POST /api/content/parse - Segments and render descriptors for given text
- POST /api/content/export - Spreadsheet row and TSV line for given text
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from teeshot.api.response import success_response
from teeshot.content.image_status import ImageStatusMap
from teeshot.models import ContentRequest, ExportContentRequest, ParseContentRequest
from teeshot.services import content_service, session_store
from teeshot.services.image_service import session_image_prompts
from teeshot.services.presentation import (
    export_view,
    parse_view,
    session_view,
    statuses_from_urls,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/content", tags=["Content"])


@router.post("/generate")
async def generate_content(request: ContentRequest) -> JSONResponse:
    """Generate content for the form values and open a new session.

    Returns:
        {data: SessionView, error: null} with status 201.
        Generation failures are turned into error envelopes by the
        LLMError handler.
    """
    generated = await content_service.generate_content(request)
    session = await session_store.create_session(generated, request)

    logger.info(
        f"Opened session {session.session_id}",
        extra={"session_id": session.session_id, "content_format": session.format.value},
    )
    view = session_view(session, session_image_prompts(session))
    return JSONResponse(status_code=201, content=success_response(view))


@router.post("/parse")
async def parse_content(request: ParseContentRequest) -> dict:
    """Parse text the client already holds into segments and descriptors."""
    view = parse_view(
        request.content,
        hint=request.format,
        keyword=request.keyword,
        citations=request.sources,
        statuses=ImageStatusMap(request.images),
    )
    return success_response(view)


@router.post("/export")
async def export_content(request: ExportContentRequest) -> dict:
    """Build the spreadsheet row for text the client already holds."""
    view = export_view(
        request.content,
        hint=request.format,
        statuses=statuses_from_urls(request.image_urls),
        category=request.category,
        citations=request.sources,
    )
    return success_response(view)
