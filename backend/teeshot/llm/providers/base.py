"""Abstract base class for generation providers.

Defines the interface that all providers must implement. Text generation is
mandatory; image and video generation are optional capabilities.
"""

from abc import ABC, abstractmethod

from ..models import ImageRequest, ImageResult, LLMRequest, LLMResponse, VideoRequest


class LLMProvider(ABC):
    """Base interface for generation providers.

    All providers (OpenAI, Anthropic, etc.) must implement this interface
    to ensure consistent behavior across the application.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier: 'openai', 'anthropic', etc."""
        ...

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request and return the response.

        Args:
            request: Vendor-neutral LLM request.

        Returns:
            Vendor-neutral LLM response.

        Raises:
            AuthenticationError: Invalid or missing API key.
            RateLimitError: Rate limit exceeded (retryable).
            TimeoutError: Request timed out (retryable).
            InvalidRequestError: Malformed request (non-retryable).
            ContentFilterError: Response blocked by safety filters.
            ModelNotFoundError: Unknown model (falls back to the next model).
            ProviderError: Provider-side failure (retryable).
        """
        ...

    @abstractmethod
    def supports(self, feature: str) -> bool:
        """Check if provider supports a capability.

        Args:
            feature: Feature name. Supported values:
                - 'system_message': Dedicated system role
                - 'web_citations': URL citations on text responses
                - 'image_generation': Text-to-image
                - 'video_generation': Text-to-video

        Returns:
            True if the feature is supported.
        """
        ...

    async def generate_image(self, request: ImageRequest) -> ImageResult:
        """Generate one image.

        Raises:
            NotImplementedError: If image generation is not supported.
        """
        raise NotImplementedError(f"Image generation not supported by {self.name}")

    async def generate_video(self, request: VideoRequest) -> bytes:
        """Generate one short video and return the MP4 bytes.

        Raises:
            NotImplementedError: If video generation is not supported.
        """
        raise NotImplementedError(f"Video generation not supported by {self.name}")

    @property
    def is_configured(self) -> bool:
        """True when an API key is available for this provider."""
        return bool(getattr(self, "_api_key", None))
