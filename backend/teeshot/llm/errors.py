"""LLM error hierarchy.

Custom exceptions for generation calls (text, image, video) with provider
context. The status code reported by the provider is kept on the exception
so callers can classify failures for the user.
"""


class LLMError(Exception):
    """Base exception for generation calls."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.request_id = request_id
        self.correlation_id = correlation_id
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.status_code:
            parts.append(f"status={self.status_code}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " ".join(parts)


class AuthenticationError(LLMError):
    """401/403 - Invalid or missing API key.

    Non-retryable. Check API key configuration.
    """

    pass


class RateLimitError(LLMError):
    """429 - Rate limit exceeded.

    Retryable with exponential backoff. Respect retry_after if provided.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
        status_code: int | None = 429,
    ):
        super().__init__(message, provider, request_id, correlation_id, status_code)
        self.retry_after = retry_after


class TimeoutError(LLMError):
    """Request exceeded timeout threshold."""

    pass


class InvalidRequestError(LLMError):
    """400 - Malformed request.

    Non-retryable. Fix the request parameters.
    """

    pass


class ContentFilterError(LLMError):
    """Prompt or response blocked by the provider's safety system."""

    pass


class ProviderError(LLMError):
    """500/502/503 - Provider-side failure, or an empty answer.

    Retryable. May be transient server overload.
    """

    pass


class ModelNotFoundError(LLMError):
    """404 - Model identifier not recognized.

    Not retried, but the next model in the fallback chain is tried.
    """

    pass


# Error classification for retry and model fallback
RETRYABLE_ERRORS = (RateLimitError, TimeoutError, ProviderError)
FALLBACK_ERRORS = RETRYABLE_ERRORS + (ModelNotFoundError,)
NON_RETRYABLE_ERRORS = (AuthenticationError, InvalidRequestError, ContentFilterError, ModelNotFoundError)
