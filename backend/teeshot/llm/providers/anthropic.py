"""Anthropic provider implementation.

Implements the LLMProvider interface for Anthropic's Messages API. Used as the
last link of the text model fallback chain; it has no image or video models.
"""

import os
import time
from typing import Any

from anthropic import (
    AsyncAnthropic,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
)

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
from ..models import LLMRequest, LLMResponse, Usage
from .base import LLMProvider


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider (text only)."""

    # Supported capabilities
    SUPPORTED_FEATURES = {
        "system_message",
    }

    DEFAULT_MAX_TOKENS = 8192

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        default_model: str = "claude-sonnet-4-5-20250929",
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            timeout: Request timeout in seconds.
            default_model: Default model to use if not specified in request.
        """
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._timeout = timeout
        self._default_model = default_model
        self._client: AsyncAnthropic | None = None

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "anthropic"

    @property
    def client(self) -> AsyncAnthropic:
        """Lazy-initialized Anthropic client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        return self._client

    def supports(self, feature: str) -> bool:
        """Check if feature is supported."""
        return feature in self.SUPPORTED_FEATURES

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request to Anthropic.

        Raises:
            Various LLMError subclasses based on the error type.
        """
        start_time = time.perf_counter()
        anthropic_request = self._build_request(request)

        try:
            response = await self.client.messages.create(**anthropic_request)
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            return self._parse_response(response, latency_ms)

        except APITimeoutError as e:
            raise TimeoutError(
                f"Anthropic request timed out after {self._timeout}s",
                provider=self.name,
            ) from e

        except APIConnectionError as e:
            raise ProviderError(
                f"Failed to connect to Anthropic: {e}",
                provider=self.name,
            ) from e

        except APIStatusError as e:
            self._handle_api_error(e)

    def _build_request(self, request: LLMRequest) -> dict[str, Any]:
        """Convert LLMRequest to Anthropic API format."""
        # Anthropic takes system as a top-level parameter
        system_parts = [msg.content for msg in request.messages if msg.role == "system"]
        messages = [
            {"role": msg.role, "content": msg.content}
            for msg in request.messages
            if msg.role != "system"
        ]

        anthropic_request: dict[str, Any] = {
            "model": request.model or self._default_model,
            "messages": messages,
            "max_tokens": request.max_tokens or self.DEFAULT_MAX_TOKENS,
            # Anthropic uses a 0-1 temperature range
            "temperature": min(request.temperature, 1.0),
        }
        if system_parts:
            anthropic_request["system"] = "\n\n".join(system_parts)
        if request.stop:
            anthropic_request["stop_sequences"] = request.stop

        return anthropic_request

    def _parse_response(self, response: Any, latency_ms: int) -> LLMResponse:
        """Convert Anthropic response to LLMResponse."""
        text_parts = [block.text for block in response.content if block.type == "text"]
        text = "\n".join(text_parts) if text_parts else None

        # Map Anthropic stop reasons to our format
        finish_reason_map = {
            "end_turn": "stop",
            "max_tokens": "length",
            "stop_sequence": "stop",
        }
        finish_reason = finish_reason_map.get(response.stop_reason, response.stop_reason)

        return LLMResponse(
            text=text,
            finish_reason=finish_reason or "stop",
            usage=Usage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            ),
            model=response.model,
            provider=self.name,
            latency_ms=latency_ms,
            request_id=response.id,
            raw=response.model_dump() if hasattr(response, "model_dump") else None,
        )

    def _handle_api_error(self, error: APIStatusError) -> None:
        """Convert Anthropic API errors to LLMError types."""
        status_code = error.status_code
        message = str(error.message) if hasattr(error, "message") else str(error)
        request_id = getattr(error, "request_id", None)
        context = {"provider": self.name, "request_id": request_id, "status_code": status_code}

        if status_code in (401, 403):
            raise AuthenticationError(f"Anthropic authentication failed: {message}", **context) from error

        if status_code == 404:
            raise ModelNotFoundError(f"Model not found: {message}", **context) from error

        if status_code == 429:
            retry_after = None
            if hasattr(error, "response") and error.response:
                retry_after_str = error.response.headers.get("retry-after")
                if retry_after_str:
                    try:
                        retry_after = float(retry_after_str)
                    except ValueError:
                        pass

            raise RateLimitError(
                f"Anthropic rate limit exceeded: {message}",
                retry_after=retry_after,
                **context,
            ) from error

        if status_code == 400:
            if "safety" in message.lower() or "harmful" in message.lower():
                raise ContentFilterError(
                    f"Content blocked by Anthropic safety filters: {message}",
                    **context,
                ) from error

            raise InvalidRequestError(f"Invalid request to Anthropic: {message}", **context) from error

        # 529 (overloaded) lands here too
        if status_code >= 500:
            raise ProviderError(f"Anthropic server error ({status_code}): {message}", **context) from error

        raise LLMError(f"Anthropic error ({status_code}): {message}", **context) from error
