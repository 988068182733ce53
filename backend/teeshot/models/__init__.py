"""Backend models package.

Note: keep backend models as the source-of-truth schemas for OpenAPI + frontend types.
"""

from .content import ContentRequest, FormatLabel, GeneratedContent
from teeshot.content.image_status import ImageState, ImageStatus, ImageStatusMap
from .session import ContentSession
from .api import (
    ExportContentRequest,
    ExportResponse,
    ImageEntry,
    ImageGenerateRequest,
    ImageListResponse,
    ParseContentRequest,
    ParseContentResponse,
    RenderResponse,
    SessionView,
    VideoGenerateRequest,
)

__all__ = [
    "ContentRequest",
    "FormatLabel",
    "GeneratedContent",
    "ImageState",
    "ImageStatus",
    "ImageStatusMap",
    "ContentSession",
    "ExportContentRequest",
    "ExportResponse",
    "ImageEntry",
    "ImageGenerateRequest",
    "ImageListResponse",
    "ParseContentRequest",
    "ParseContentResponse",
    "RenderResponse",
    "SessionView",
    "VideoGenerateRequest",
]
