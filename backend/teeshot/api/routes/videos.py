"""Short-form video endpoint.

Endpoints:
- POST /api/videos/generate - Generate a video and return the MP4 bytes
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response

from teeshot.models import VideoGenerateRequest
from teeshot.services import video_service

router = APIRouter(prefix="/api/videos", tags=["Videos"])


@router.post("/generate")
async def generate_video(request: VideoGenerateRequest) -> Response:
    """Generate a video. The request blocks until the provider job finishes."""
    data = await video_service.generate_video(
        request.prompt,
        aspect_ratio=request.aspect_ratio,
        resolution=request.resolution,
    )
    return Response(content=data, media_type=video_service.VIDEO_MEDIA_TYPE)
