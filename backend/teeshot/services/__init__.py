"""Services package for generation, sessions and image assets."""

from . import asset_store
from . import content_service
from . import image_service
from . import session_store
from . import video_service

from .content_service import describe_generation_error, generate_content
from .prompt_builder import build_user_prompt
from .reference_fetcher import fetch_reference_text
from .session_store import SessionStore, get_session_store

__all__ = [
    "asset_store",
    "content_service",
    "image_service",
    "session_store",
    "video_service",
    "build_user_prompt",
    "describe_generation_error",
    "fetch_reference_text",
    "generate_content",
    "SessionStore",
    "get_session_store",
]
