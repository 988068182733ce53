"""GridFS storage for generated images.

Provides async operations for:
- Storing a generated JPEG under a name derived from its prompt
- Building the durable URL that the spreadsheet export carries
- Retrieving and deleting stored images
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from gridfs import NoFile

from teeshot.db.mongo import get_gridfs_bucket

logger = logging.getLogger(__name__)

IMAGE_BUCKET = os.getenv("IMAGE_BUCKET", "images")
MAX_NAME_CHARS = 50
FALLBACK_NAME = "image"

_NON_NAME_RE = re.compile(r"[^a-z0-9_]")
_SPACES_RE = re.compile(r"\s+")
_UNDERSCORES_RE = re.compile(r"_+")


def public_base_url() -> str:
    """Base URL prefixed to asset URLs (empty means relative URLs)."""
    return os.getenv("PUBLIC_BASE_URL", "").rstrip("/")


def asset_basename(prompt: str) -> str:
    """Reduce a prompt to `[a-z0-9_]`, at most 50 chars, never empty."""
    name = _SPACES_RE.sub("_", prompt.lower())
    name = _NON_NAME_RE.sub("", name)
    name = _UNDERSCORES_RE.sub("_", name).strip("_")
    return name[:MAX_NAME_CHARS] or FALLBACK_NAME


def asset_filename(prompt: str, now: datetime | None = None) -> str:
    """Unique file name: prompt basename, UTC date and millisecond timestamp."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{asset_basename(prompt)}_{now:%Y%m%d}_{millis}.jpeg"


def asset_url(file_id: str) -> str:
    return f"{public_base_url()}/api/images/assets/{file_id}/content"


async def store_image(
    content: bytes,
    prompt: str,
    media_type: str = "image/jpeg",
    metadata: dict[str, Any] | None = None,
) -> tuple[str, str]:
    """Store an image in GridFS.

    Args:
        content: Image bytes.
        prompt: Prompt the image was generated from (names the file).
        media_type: MIME type stored in the file metadata.
        metadata: Extra metadata (e.g. session_id).

    Returns:
        Tuple of (file_id, durable URL).
    """
    bucket = await get_gridfs_bucket(IMAGE_BUCKET)
    name = asset_filename(prompt)

    file_id = await bucket.upload_from_stream(
        name,
        content,
        metadata={
            "content_type": media_type,
            "prompt": prompt,
            **(metadata or {}),
        },
    )

    logger.info(f"Stored image {name} ({len(content)} bytes) -> {file_id}")
    return str(file_id), asset_url(str(file_id))


async def get_image(file_id: str) -> tuple[bytes, str, dict[str, Any]] | None:
    """Retrieve an image from GridFS.

    Returns:
        Tuple of (content bytes, content_type, metadata) or None if not found.
    """
    try:
        object_id = ObjectId(file_id)
    except InvalidId:
        logger.warning(f"Invalid image id: {file_id}")
        return None

    bucket = await get_gridfs_bucket(IMAGE_BUCKET)
    try:
        grid_out = await bucket.open_download_stream(object_id)
        content = await grid_out.read()
    except NoFile:
        logger.warning(f"Image not found: {file_id}")
        return None

    metadata = grid_out.metadata or {}
    content_type = metadata.get("content_type", "application/octet-stream")
    return content, content_type, metadata


async def delete_image(file_id: str) -> bool:
    """Delete an image from GridFS.

    Returns:
        True if deleted, False if the id is invalid or not found.
    """
    try:
        object_id = ObjectId(file_id)
    except InvalidId:
        return False

    bucket = await get_gridfs_bucket(IMAGE_BUCKET)
    try:
        await bucket.delete(object_id)
    except NoFile:
        logger.warning(f"Image not found for delete: {file_id}")
        return False

    logger.info(f"Deleted image: {file_id}")
    return True
