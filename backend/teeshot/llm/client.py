"""High-level generation client with retry and model fallback.

Text generation walks an ordered model chain: each model is retried with
exponential backoff on transient failures, and when a model keeps failing
(or does not exist) the next model in the chain is tried. Image generation
uses the same retry policy against a single image model.
"""

import asyncio
import logging
import os
import uuid
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .errors import (
    AuthenticationError,
    FALLBACK_ERRORS,
    LLMError,
    ProviderError,
    RateLimitError,
    RETRYABLE_ERRORS,
)
from .models import ImageRequest, ImageResult, LLMRequest, LLMResponse, VideoRequest
from .providers.anthropic import AnthropicProvider
from .providers.base import LLMProvider
from .providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


def provider_for_model(model: str) -> str:
    """Provider name serving `model`."""
    return "anthropic" if model.startswith("claude-") else "openai"


class LLMClient:
    """High-level generation client with retry and fallback.

    Features:
    - Retry with exponential backoff for rate limits and server overload
    - Model fallback along LLM_MODEL_CHAIN (across providers)
    - Correlation ID tracking across attempts
    - Configurable via environment variables

    Configuration (env vars):
    - LLM_MODEL_CHAIN: Comma-separated text models, tried in order
    - LLM_TIMEOUT_SECONDS: Request timeout (default: 60)
    - LLM_MAX_RETRIES: Retries per text model (default: 1)
    - IMAGE_MAX_RETRIES: Retries per image request (default: 2)
    """

    # Default configuration
    DEFAULT_MODEL_CHAIN = (
        "gpt-4o-search-preview",
        "gpt-4o",
        "gpt-4o-mini",
        "claude-sonnet-4-5-20250929",
    )
    DEFAULT_TIMEOUT = 60.0
    DEFAULT_MAX_RETRIES = 1
    DEFAULT_IMAGE_MAX_RETRIES = 2
    DEFAULT_BASE_DELAY = 2.0  # Base delay for exponential backoff
    DEFAULT_MAX_DELAY = 30.0  # Maximum delay between retries
    BACKOFF_GROWTH = 1.5
    RATE_LIMIT_MULTIPLIER = 3
    OVERLOAD_MULTIPLIER = 2

    def __init__(
        self,
        model_chain: list[str] | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        image_max_retries: int | None = None,
        openai_api_key: str | None = None,
        anthropic_api_key: str | None = None,
    ):
        """Initialize the client.

        Args:
            model_chain: Text models in fallback order. Defaults to LLM_MODEL_CHAIN env var.
            timeout: Request timeout in seconds. Defaults to LLM_TIMEOUT_SECONDS env var.
            max_retries: Retries per text model. Defaults to LLM_MAX_RETRIES env var.
            image_max_retries: Retries per image. Defaults to IMAGE_MAX_RETRIES env var.
            openai_api_key: OpenAI API key. Defaults to OPENAI_API_KEY env var.
            anthropic_api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
        """
        if model_chain is None:
            env_chain = os.environ.get("LLM_MODEL_CHAIN", "")
            model_chain = [m.strip() for m in env_chain.split(",") if m.strip()]
        self._model_chain = list(model_chain) or list(self.DEFAULT_MODEL_CHAIN)

        self._timeout = (
            timeout
            if timeout is not None
            else float(os.environ.get("LLM_TIMEOUT_SECONDS", self.DEFAULT_TIMEOUT))
        )
        self._max_retries = (
            max_retries
            if max_retries is not None
            else int(os.environ.get("LLM_MAX_RETRIES", self.DEFAULT_MAX_RETRIES))
        )
        self._image_max_retries = (
            image_max_retries
            if image_max_retries is not None
            else int(os.environ.get("IMAGE_MAX_RETRIES", self.DEFAULT_IMAGE_MAX_RETRIES))
        )

        self._providers: dict[str, LLMProvider] = {
            "openai": OpenAIProvider(api_key=openai_api_key, timeout=self._timeout),
            "anthropic": AnthropicProvider(api_key=anthropic_api_key, timeout=self._timeout),
        }

    @property
    def model_chain(self) -> list[str]:
        return list(self._model_chain)

    def get_provider(self, name: str) -> LLMProvider:
        """Get a specific provider by name.

        Raises:
            ValueError: If provider name is not recognized.
        """
        if name not in self._providers:
            raise ValueError(f"Unknown provider: {name}. Available: {list(self._providers.keys())}")
        return self._providers[name]

    def is_provider_available(self, name: str) -> bool:
        """Check if a provider is configured with an API key."""
        provider = self._providers.get(name)
        return provider is not None and provider.is_configured

    async def generate(
        self,
        request: LLMRequest,
        fallback: bool = True,
        correlation_id: str | None = None,
    ) -> LLMResponse:
        """Generate a completion with retry and model fallback.

        The request's own model is tried first, followed by the rest of the
        model chain when `fallback` is set. Models whose provider has no API
        key are skipped.

        Returns:
            Response from the first model that produced text.

        Raises:
            LLMError: Non-fallback errors immediately; otherwise the last
                error once every model has failed.
        """
        correlation_id = correlation_id or str(uuid.uuid4())

        models = [request.model] if request.model else []
        if fallback or not models:
            models.extend(m for m in self._model_chain if m not in models)

        last_error: LLMError | None = None

        for model in models:
            provider_name = provider_for_model(model)
            if not self.is_provider_available(provider_name):
                logger.debug(
                    "Provider %s not available, skipping model %s",
                    provider_name,
                    model,
                    extra={"correlation_id": correlation_id},
                )
                continue

            provider = self.get_provider(provider_name)
            model_request = request.model_copy(update={"model": model})

            try:
                return await self._with_retry(
                    lambda: self._generate_text(provider, model_request),
                    provider_name=provider_name,
                    model=model,
                    max_retries=self._max_retries,
                    correlation_id=correlation_id,
                )

            except FALLBACK_ERRORS as e:
                last_error = e
                logger.warning(
                    "Model %s failed: %s. Trying next model.",
                    model,
                    str(e),
                    extra={
                        "correlation_id": correlation_id,
                        "provider": provider_name,
                        "model": model,
                        "error_type": type(e).__name__,
                    },
                )

            except LLMError as e:
                logger.error(
                    "Model %s failed with non-retryable error: %s",
                    model,
                    str(e),
                    extra={
                        "correlation_id": correlation_id,
                        "provider": provider_name,
                        "model": model,
                        "error_type": type(e).__name__,
                    },
                )
                raise

        if last_error:
            raise last_error

        raise AuthenticationError("No providers available", correlation_id=correlation_id)

    async def generate_image(
        self,
        request: ImageRequest,
        correlation_id: str | None = None,
    ) -> ImageResult:
        """Generate one image with retry on rate limits and overload."""
        correlation_id = correlation_id or str(uuid.uuid4())
        provider_name = provider_for_model(request.model)
        provider = self.get_provider(provider_name)
        return await self._with_retry(
            lambda: provider.generate_image(request),
            provider_name=provider_name,
            model=request.model,
            max_retries=self._image_max_retries,
            correlation_id=correlation_id,
        )

    async def generate_video(self, request: VideoRequest) -> bytes:
        """Generate a video. Video jobs are long-running and are not retried."""
        provider = self.get_provider(provider_for_model(request.model))
        return await provider.generate_video(request)

    async def _generate_text(self, provider: LLMProvider, request: LLMRequest) -> LLMResponse:
        response = await provider.generate(request)
        if not response.text or not response.text.strip():
            raise ProviderError(
                f"Model {request.model} returned an empty response",
                provider=provider.name,
                request_id=response.request_id,
            )
        return response

    async def _with_retry(
        self,
        call: Callable[[], Awaitable[T]],
        provider_name: str,
        model: str,
        max_retries: int,
        correlation_id: str,
    ) -> T:
        """Run `call`, retrying retryable errors with backoff.

        Raises:
            LLMError: Non-retryable errors immediately, the last retryable
                error once retries are exhausted.
        """
        last_error: LLMError | None = None

        for attempt in range(max_retries + 1):
            try:
                logger.debug(
                    "Attempting request to %s (attempt %d/%d)",
                    model,
                    attempt + 1,
                    max_retries + 1,
                    extra={
                        "correlation_id": correlation_id,
                        "provider": provider_name,
                        "model": model,
                        "attempt": attempt + 1,
                    },
                )

                result = await call()

                logger.info(
                    "Generation request succeeded",
                    extra={
                        "correlation_id": correlation_id,
                        "provider": provider_name,
                        "model": model,
                        "latency_ms": getattr(result, "latency_ms", None),
                    },
                )
                return result

            except RETRYABLE_ERRORS as e:
                last_error = e
                e.correlation_id = correlation_id

                logger.warning(
                    "Retryable error on attempt %d/%d: %s",
                    attempt + 1,
                    max_retries + 1,
                    str(e),
                    extra={
                        "correlation_id": correlation_id,
                        "provider": provider_name,
                        "model": model,
                        "attempt": attempt + 1,
                        "error_type": type(e).__name__,
                    },
                )

                if attempt < max_retries:
                    delay = self._calculate_backoff(attempt, e)
                    logger.debug(
                        "Waiting %.2f seconds before retry",
                        delay,
                        extra={"correlation_id": correlation_id},
                    )
                    await asyncio.sleep(delay)

        if last_error:
            raise last_error

        raise LLMError(
            f"Model {model} failed after {max_retries + 1} attempts",
            provider=provider_name,
            correlation_id=correlation_id,
        )

    def _calculate_backoff(self, attempt: int, error: Exception) -> float:
        """Calculate backoff delay: base * multiplier * 1.5^attempt, capped.

        With the default 2s base, rate limits wait 6s, 9s, ... and other
        retryable errors 4s, 6s, .... A provider retry-after wins when given.

        Args:
            attempt: Current attempt number (0-indexed).
            error: The error that triggered the retry.

        Returns:
            Delay in seconds.
        """
        if isinstance(error, RateLimitError) and error.retry_after:
            return min(error.retry_after, self.DEFAULT_MAX_DELAY)

        if isinstance(error, RateLimitError):
            multiplier = self.RATE_LIMIT_MULTIPLIER
        else:
            multiplier = self.OVERLOAD_MULTIPLIER
        delay = self.DEFAULT_BASE_DELAY * multiplier * (self.BACKOFF_GROWTH ** attempt)
        return min(delay, self.DEFAULT_MAX_DELAY)


# Convenience functions for module-level access
_default_client: LLMClient | None = None


def get_client() -> LLMClient:
    """Get the default client singleton."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client
