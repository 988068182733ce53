"""Image generation for the prompts of a content session.

Each request marks its prompt pending and receives a token; the result is
written back with that token, so a superseded request cannot overwrite a
newer one. Generated images are re-encoded as JPEG, shown immediately via a
data: URL and uploaded to the asset store for a durable URL. Upload failure
leaves the image usable locally, just not exportable.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from teeshot.content import clean_content, collect_image_prompts, segment
from teeshot.llm import ImageRequest, LLMClient, LLMError, get_client
from teeshot.models import ContentSession, ImageState, ImageStatus

from . import asset_store
from .content_service import describe_generation_error
from .image_utils import to_data_url, to_jpeg

logger = logging.getLogger(__name__)

IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gpt-image-1")
INTERRUPTED_MESSAGE = "이미지 생성이 중단되었습니다. 다시 시도해주세요."


def session_image_prompts(session: ContentSession) -> list[str]:
    """Unique image prompts of the session content, in first-seen order."""
    segments = segment(clean_content(session.generated.content), session.format)
    return collect_image_prompts(segments)


def _fail_if_pending(session: ContentSession, prompt: str, token: int) -> None:
    status = session.images.get(prompt)
    if status.state is ImageState.pending and status.token == token:
        session.images.mark_failed(prompt, INTERRUPTED_MESSAGE, token=token)


async def _run_generation(
    session: ContentSession,
    prompt: str,
    token: int,
    client: LLMClient,
) -> ImageStatus:
    log_extra = {"session_id": session.session_id, "prompt": prompt[:80]}

    try:
        result = await client.generate_image(ImageRequest(prompt=prompt, model=IMAGE_MODEL))
        jpeg = to_jpeg(result.data)
    except LLMError as e:
        info = describe_generation_error(e)
        logger.warning(f"Image generation failed: {e}", extra=log_extra)
        session.images.mark_failed(prompt, info.message, token=token)
        return session.images.get(prompt)
    except ValueError as e:
        logger.warning(f"Generated image could not be decoded: {e}", extra=log_extra)
        session.images.mark_failed(prompt, str(e), token=token)
        return session.images.get(prompt)
    except Exception as e:
        info = describe_generation_error(e)
        logger.exception(f"Unexpected image generation error: {e}", extra=log_extra)
        session.images.mark_failed(prompt, info.message, token=token)
        return session.images.get(prompt)

    remote_url = None
    try:
        _, remote_url = await asset_store.store_image(
            jpeg,
            prompt,
            metadata={"session_id": session.session_id},
        )
    except Exception as e:
        logger.error(f"Image upload failed, keeping local copy only: {e}", extra=log_extra)

    if not session.images.mark_ready(prompt, to_data_url(jpeg), remote_url, token=token):
        logger.info("Discarded stale image result", extra=log_extra)
    session.touch()
    return session.images.get(prompt)


async def generate_image(
    session: ContentSession,
    prompt: str,
    client: Optional[LLMClient] = None,
) -> ImageStatus:
    """Generate (or regenerate) the image for one prompt.

    Returns:
        The prompt's status after the attempt (ready or failed, or whatever a
        newer request has written meanwhile).
    """
    token = session.images.mark_pending(prompt)
    try:
        return await _run_generation(session, prompt, token, client or get_client())
    finally:
        _fail_if_pending(session, prompt, token)


async def generate_all_images(
    session: ContentSession,
    client: Optional[LLMClient] = None,
) -> dict[str, ImageStatus]:
    """Generate every not-yet-ready image of the session, one at a time.

    All outstanding prompts are marked pending before the first request is
    sent. Prompts already ready are skipped.

    Returns:
        Prompt -> status for every prompt of the session, in content order.
    """
    client = client or get_client()
    prompts = session_image_prompts(session)
    tokens = {
        prompt: session.images.mark_pending(prompt)
        for prompt in prompts
        if not session.images.is_ready(prompt)
    }

    logger.info(
        f"Generating {len(tokens)} of {len(prompts)} images",
        extra={"session_id": session.session_id},
    )
    try:
        for prompt, token in tokens.items():
            await _run_generation(session, prompt, token, client)
    finally:
        # Entries still pending here were interrupted, e.g. by cancellation
        for prompt, token in tokens.items():
            _fail_if_pending(session, prompt, token)

    return session.images.snapshot(prompts)
