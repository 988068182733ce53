"""Short-form video generation.

Video jobs run for minutes; the provider call polls until the job finishes
and returns the MP4 bytes. There is no retry.
"""

from __future__ import annotations

import logging
import os
from typing import Literal, Optional

from teeshot.llm import LLMClient, VideoRequest, get_client

logger = logging.getLogger(__name__)

VIDEO_MODEL = os.getenv("VIDEO_MODEL", "sora-2")
VIDEO_MEDIA_TYPE = "video/mp4"


async def generate_video(
    prompt: str,
    aspect_ratio: Literal["16:9", "9:16"] = "9:16",
    resolution: Literal["720p", "1080p"] = "720p",
    client: Optional[LLMClient] = None,
) -> bytes:
    """Generate one video for `prompt`.

    Raises:
        LLMError: If the provider rejects the job or it fails or times out.
    """
    client = client or get_client()
    request = VideoRequest(
        prompt=prompt,
        model=VIDEO_MODEL,
        aspect_ratio=aspect_ratio,
        resolution=resolution,
    )
    logger.info(
        f"Generating {aspect_ratio} {resolution} video",
        extra={"model": VIDEO_MODEL},
    )
    data = await client.generate_video(request)
    logger.info(f"Video generated ({len(data)} bytes)", extra={"model": VIDEO_MODEL})
    return data
