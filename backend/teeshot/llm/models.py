"""LLM data models.

Vendor-neutral request and response models for generation calls.
These models abstract away provider-specific details.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single message in the conversation."""

    role: Literal["system", "user", "assistant"]
    content: str


class LLMRequest(BaseModel):
    """Vendor-neutral text generation request."""

    messages: list[ChatMessage]
    model: str
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    max_tokens: int | None = None
    stop: list[str] | None = None
    metadata: dict[str, Any] | None = None


class Usage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class UrlCitation(BaseModel):
    """A web source the provider cited while answering."""

    uri: str
    title: str = ""


class LLMResponse(BaseModel):
    """Vendor-neutral text generation response."""

    text: str | None
    finish_reason: str
    usage: Usage
    model: str
    provider: str
    latency_ms: int
    citations: list[UrlCitation] = Field(default_factory=list)
    request_id: str | None = None
    raw: dict[str, Any] | None = None


class ImageRequest(BaseModel):
    """Single image generation request."""

    prompt: str
    model: str
    size: str = "1024x1024"


class ImageResult(BaseModel):
    """Raw image bytes returned by a provider."""

    data: bytes
    model: str
    provider: str
    latency_ms: int
    media_type: str = "image/png"


class VideoRequest(BaseModel):
    """Short video generation request."""

    prompt: str
    model: str
    aspect_ratio: Literal["16:9", "9:16"] = "9:16"
    resolution: Literal["720p", "1080p"] = "720p"
    seconds: int | None = None
