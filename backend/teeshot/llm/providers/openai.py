"""OpenAI provider implementation.

Implements the LLMProvider interface for OpenAI: Chat Completions for text
(with URL citations from search-enabled models), the Images API for card
images and the Videos API for short-form clips.
"""

import asyncio
import base64
import os
import time
from collections.abc import Awaitable
from typing import Any, TypeVar

from openai import AsyncOpenAI, APIConnectionError, APIStatusError, APITimeoutError

from ..errors import (
    AuthenticationError,
    ContentFilterError,
    InvalidRequestError,
    LLMError,
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from ..models import (
    ImageRequest,
    ImageResult,
    LLMRequest,
    LLMResponse,
    UrlCitation,
    Usage,
    VideoRequest,
)
from .base import LLMProvider

T = TypeVar("T")

# (aspect ratio, resolution) -> Videos API size
VIDEO_SIZES = {
    ("16:9", "720p"): "1280x720",
    ("9:16", "720p"): "720x1280",
    ("16:9", "1080p"): "1792x1024",
    ("9:16", "1080p"): "1024x1792",
}


def is_search_model(model: str) -> bool:
    """Chat models with built-in web search (URL citations in the reply)."""
    return "search" in model


class OpenAIProvider(LLMProvider):
    """OpenAI provider for text, image and video generation."""

    # Supported capabilities
    SUPPORTED_FEATURES = {
        "system_message",
        "web_citations",
        "image_generation",
        "video_generation",
    }

    VIDEO_POLL_SECONDS = 10.0
    VIDEO_MAX_WAIT_SECONDS = 600.0

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        default_model: str = "gpt-4o",
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key. Defaults to OPENAI_API_KEY env var.
            timeout: Request timeout in seconds.
            default_model: Default model to use if not specified in request.
        """
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._timeout = timeout
        self._default_model = default_model
        self._client: AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "openai"

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-initialized OpenAI client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "OpenAI API key not configured. Set OPENAI_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    def supports(self, feature: str) -> bool:
        """Check if feature is supported."""
        return feature in self.SUPPORTED_FEATURES

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request to OpenAI.

        Raises:
            Various LLMError subclasses based on the error type.
        """
        start_time = time.perf_counter()
        openai_request = self._build_request(request)
        response = await self._call(self.client.chat.completions.create(**openai_request))
        latency_ms = int((time.perf_counter() - start_time) * 1000)
        return self._parse_response(response, latency_ms)

    async def generate_image(self, request: ImageRequest) -> ImageResult:
        """Generate one image and return its decoded bytes."""
        start_time = time.perf_counter()
        response = await self._call(
            self.client.images.generate(
                model=request.model,
                prompt=request.prompt,
                size=request.size,
                n=1,
            )
        )
        latency_ms = int((time.perf_counter() - start_time) * 1000)

        if not response.data or not response.data[0].b64_json:
            raise ProviderError("OpenAI returned no image data", provider=self.name)

        return ImageResult(
            data=base64.b64decode(response.data[0].b64_json),
            model=request.model,
            provider=self.name,
            latency_ms=latency_ms,
        )

    async def generate_video(self, request: VideoRequest) -> bytes:
        """Start a video job, poll until it finishes and download the MP4."""
        size = VIDEO_SIZES[(request.aspect_ratio, request.resolution)]
        params: dict[str, Any] = {"model": request.model, "prompt": request.prompt, "size": size}
        if request.seconds:
            params["seconds"] = str(request.seconds)

        video = await self._call(self.client.videos.create(**params))
        deadline = time.monotonic() + self.VIDEO_MAX_WAIT_SECONDS
        while video.status in ("queued", "in_progress"):
            if time.monotonic() > deadline:
                raise TimeoutError(
                    f"OpenAI video {video.id} not finished after {self.VIDEO_MAX_WAIT_SECONDS}s",
                    provider=self.name,
                )
            await asyncio.sleep(self.VIDEO_POLL_SECONDS)
            video = await self._call(self.client.videos.retrieve(video.id))

        if video.status != "completed":
            error = getattr(video, "error", None)
            message = getattr(error, "message", None) or f"status {video.status}"
            raise ProviderError(f"OpenAI video generation failed: {message}", provider=self.name)

        content = await self._call(self.client.videos.download_content(video.id, variant="video"))
        return content.content

    async def _call(self, awaitable: Awaitable[T]) -> T:
        """Await an SDK call, translating SDK exceptions to LLMError types."""
        try:
            return await awaitable
        except APITimeoutError as e:
            raise TimeoutError(
                f"OpenAI request timed out after {self._timeout}s",
                provider=self.name,
            ) from e
        except APIConnectionError as e:
            raise ProviderError(
                f"Failed to connect to OpenAI: {e}",
                provider=self.name,
            ) from e
        except APIStatusError as e:
            self._handle_api_error(e)

    def _build_request(self, request: LLMRequest) -> dict[str, Any]:
        """Convert LLMRequest to OpenAI API format."""
        messages = [{"role": msg.role, "content": msg.content} for msg in request.messages]

        openai_request: dict[str, Any] = {
            "model": request.model or self._default_model,
            "messages": messages,
        }
        # Search-enabled models reject sampling parameters and ground on the web
        if is_search_model(openai_request["model"]):
            openai_request["web_search_options"] = {}
        else:
            openai_request["temperature"] = request.temperature

        if request.max_tokens:
            openai_request["max_tokens"] = request.max_tokens
        if request.stop:
            openai_request["stop"] = request.stop

        return openai_request

    def _parse_response(self, response: Any, latency_ms: int) -> LLMResponse:
        """Convert OpenAI response to LLMResponse."""
        choice = response.choices[0]
        message = choice.message

        citations = []
        for annotation in getattr(message, "annotations", None) or []:
            if getattr(annotation, "type", None) != "url_citation":
                continue
            cited = annotation.url_citation
            citations.append(UrlCitation(uri=cited.url, title=cited.title or cited.url))

        return LLMResponse(
            text=message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=Usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            ),
            model=response.model,
            provider=self.name,
            latency_ms=latency_ms,
            citations=citations,
            request_id=response.id,
            raw=response.model_dump() if hasattr(response, "model_dump") else None,
        )

    def _handle_api_error(self, error: APIStatusError) -> None:
        """Convert OpenAI API errors to LLMError types."""
        status_code = error.status_code
        message = str(error.message) if hasattr(error, "message") else str(error)
        request_id = getattr(error, "request_id", None)
        context = {"provider": self.name, "request_id": request_id, "status_code": status_code}

        if status_code == 401:
            raise AuthenticationError("Invalid OpenAI API key", **context) from error

        if status_code == 403:
            raise AuthenticationError(f"OpenAI access denied: {message}", **context) from error

        if status_code == 404:
            raise ModelNotFoundError(f"Model not found: {message}", **context) from error

        if status_code == 429:
            # Try to extract retry-after header
            retry_after = None
            if hasattr(error, "response") and error.response:
                retry_after_str = error.response.headers.get("retry-after")
                if retry_after_str:
                    try:
                        retry_after = float(retry_after_str)
                    except ValueError:
                        pass

            raise RateLimitError(
                f"OpenAI rate limit exceeded: {message}",
                retry_after=retry_after,
                **context,
            ) from error

        if status_code == 400:
            lowered = message.lower()
            if "content_filter" in lowered or "safety" in lowered or "moderation" in lowered:
                raise ContentFilterError(
                    f"Content blocked by OpenAI safety filters: {message}",
                    **context,
                ) from error

            raise InvalidRequestError(f"Invalid request to OpenAI: {message}", **context) from error

        if status_code >= 500:
            raise ProviderError(f"OpenAI server error ({status_code}): {message}", **context) from error

        # Unknown error
        raise LLMError(f"OpenAI error ({status_code}): {message}", **context) from error
