"""API request/response models.

Endpoints:
1. POST /api/content/generate -> SessionView for a new session
2. POST /api/content/parse / export -> stateless parsing of given text
3. /api/sessions/{id}/... -> render, export and image generation for a session

Pydantic v2. Extra fields are forbidden to prevent drift.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from teeshot.content.detector import ContentFormat
from teeshot.content.image_status import ImageStatus
from teeshot.content.renderer import RenderDescriptor
from teeshot.content.segments import Segment
from teeshot.content.sources import Citation

from .content import FormatLabel


class ParseContentRequest(BaseModel):
    """Stateless parse of text the client already has."""

    model_config = ConfigDict(extra="forbid")

    content: str = Field(description="Raw generator output")
    format: Optional[FormatLabel] = Field(default=None, description="Format hint from the request")
    keyword: Optional[str] = Field(default=None, description="Keyword highlighted in the title")
    sources: List[Citation] = Field(default_factory=list)
    images: Dict[str, ImageStatus] = Field(default_factory=dict, description="Prompt -> image status")


class ParseContentResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    format: ContentFormat
    segments: List[Segment]
    descriptors: List[RenderDescriptor]
    image_prompts: List[str]
    suggestions: List[str] = Field(default_factory=list)


class ExportContentRequest(BaseModel):
    """Stateless spreadsheet export of text the client already has."""

    model_config = ConfigDict(extra="forbid")

    content: str
    format: Optional[FormatLabel] = None
    category: str = ""
    sources: List[Citation] = Field(default_factory=list)
    image_urls: Dict[str, str] = Field(default_factory=dict, description="Prompt -> durable image URL")


class ExportResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    format: ContentFormat
    exportable: bool = Field(description="True when the format has a spreadsheet template")
    row: Optional[List[str]] = None
    tsv: Optional[str] = None


class SessionView(BaseModel):
    """Session as returned to the client."""

    model_config = ConfigDict(extra="forbid")

    session_id: str
    format: ContentFormat
    content: str
    suggestions: List[str] = Field(default_factory=list)
    sources: List[Citation] = Field(default_factory=list)
    model: Optional[str] = None
    image_prompts: List[str] = Field(default_factory=list)
    images: Dict[str, ImageStatus] = Field(default_factory=dict)
    created_at: datetime


class RenderResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    session_id: str
    format: ContentFormat
    descriptors: List[RenderDescriptor]


class ImageGenerateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    prompt: str = Field(min_length=1, description="Image prompt text as it appears in the content")


class ImageEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    prompt: str
    status: ImageStatus


class ImageListResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    session_id: str
    images: List[ImageEntry]


class VideoGenerateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    prompt: str = Field(min_length=1)
    aspect_ratio: Literal["16:9", "9:16"] = "9:16"
    resolution: Literal["720p", "1080p"] = "720p"
