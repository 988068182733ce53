"""Generation provider abstraction layer.

This module provides a vendor-neutral interface for text, image and video
generation (OpenAI, Anthropic) with model fallback and retry logic.
"""

from .client import LLMClient, get_client, provider_for_model
from .errors import (
    AuthenticationError,
    ContentFilterError,
    InvalidRequestError,
    LLMError,
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from .models import (
    ChatMessage,
    ImageRequest,
    ImageResult,
    LLMRequest,
    LLMResponse,
    UrlCitation,
    Usage,
    VideoRequest,
)

__all__ = [
    "LLMClient",
    "get_client",
    "provider_for_model",
    "LLMRequest",
    "LLMResponse",
    "ChatMessage",
    "ImageRequest",
    "ImageResult",
    "VideoRequest",
    "UrlCitation",
    "Usage",
    "LLMError",
    "AuthenticationError",
    "RateLimitError",
    "TimeoutError",
    "InvalidRequestError",
    "ContentFilterError",
    "ModelNotFoundError",
    "ProviderError",
]
