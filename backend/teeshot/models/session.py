"""Content session model.

A session holds one generation result in memory: the request, the generated
text, its detected format and the image status map for its prompts. A new
generation starts a new session; sessions are never persisted.

Pydantic v2. Extra fields are forbidden to prevent drift.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from teeshot.content.detector import ContentFormat
from teeshot.content.image_status import ImageStatusMap

from .content import ContentRequest, GeneratedContent


def _utcnow() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class ContentSession(BaseModel):
    """In-memory state for one generated piece of content."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    session_id: str = Field(description="UUID identifier for this session")
    request: Optional[ContentRequest] = Field(default=None, description="Request that produced the content")
    generated: GeneratedContent
    format: ContentFormat = Field(description="Detected content format")
    images: ImageStatusMap = Field(default_factory=ImageStatusMap, exclude=True)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def category(self) -> str:
        return self.request.category if self.request else ""

    @property
    def keyword(self) -> str:
        return self.request.keyword if self.request else ""

    def touch(self) -> None:
        self.updated_at = _utcnow()
