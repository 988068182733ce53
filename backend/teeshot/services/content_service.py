"""Text generation for a ContentRequest.

Builds the system and user prompts, sends them through the LLM client's
model fallback chain and splits the answer into content, follow-up
suggestions and cited sources.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from teeshot.content.cleaning import split_suggestions
from teeshot.content.sources import Citation
from teeshot.llm import (
    AuthenticationError,
    ChatMessage,
    LLMClient,
    LLMRequest,
    LLMResponse,
    ProviderError,
    RateLimitError,
    get_client,
)
from teeshot.llm import TimeoutError as LLMTimeoutError
from teeshot.models import ContentRequest, GeneratedContent

from .prompt_builder import build_user_prompt
from .prompts import SYSTEM_PROMPT
from .reference_fetcher import fetch_reference_text

logger = logging.getLogger(__name__)

GENERATION_TEMPERATURE = 0.8
GENERATION_MAX_TOKENS = 8000


@dataclass(frozen=True)
class GenerationErrorInfo:
    """User-facing classification of a failed generation."""

    code: str
    message: str
    status_code: int


def describe_generation_error(error: Exception) -> GenerationErrorInfo:
    """Classify a generation failure into a code and a Korean message."""
    if isinstance(error, AuthenticationError) and error.provider is None:
        return GenerationErrorInfo(
            code="INVALID_CREDENTIALS",
            message="API 키가 설정되지 않았습니다. .env 파일에 OPENAI_API_KEY 또는 ANTHROPIC_API_KEY를 설정해주세요.",
            status_code=503,
        )
    if isinstance(error, AuthenticationError):
        return GenerationErrorInfo(
            code="INVALID_CREDENTIALS",
            message="API 키가 유효하지 않거나 권한이 없습니다. .env 파일의 API 키를 확인해주세요.",
            status_code=503,
        )
    if isinstance(error, RateLimitError):
        return GenerationErrorInfo(
            code="RATE_LIMITED",
            message="API 사용 한도를 초과했습니다. 잠시 후 다시 시도해주세요.",
            status_code=429,
        )
    if isinstance(error, (ProviderError, LLMTimeoutError)):
        return GenerationErrorInfo(
            code="SERVICE_OVERLOADED",
            message="서버가 일시적으로 과부하 상태입니다. 다른 모델로 자동 전환을 시도했지만 실패했습니다. 잠시 후 다시 시도해주세요.",
            status_code=503,
        )

    detail = (error.args[0] if error.args else "") or "알 수 없는 오류"
    return GenerationErrorInfo(
        code="GENERATION_FAILED",
        message=f"콘텐츠 생성 중 오류가 발생했습니다: {detail}. 잠시 후 다시 시도해주세요.",
        status_code=503,
    )


def build_messages(request: ContentRequest, reference_text: Optional[str] = None) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_user_prompt(request, reference_text)),
    ]


def to_generated_content(response: LLMResponse) -> GeneratedContent:
    """Split a raw response into content, suggestions and sources."""
    content, suggestions = split_suggestions(response.text or "")
    sources = [
        Citation(uri=c.uri, title=c.title or c.uri)
        for c in response.citations
        if c.uri
    ]
    return GeneratedContent(
        content=content,
        suggestions=suggestions,
        sources=sources,
        model=response.model,
    )


async def generate_content(
    request: ContentRequest,
    client: Optional[LLMClient] = None,
    correlation_id: Optional[str] = None,
) -> GeneratedContent:
    """Generate content for one request.

    Args:
        request: Form values.
        client: LLM client (defaults to the module singleton).
        correlation_id: Optional id tying together the log lines of one call.

    Returns:
        GeneratedContent from the first model in the chain that answered.

    Raises:
        LLMError: When every model in the chain failed.
    """
    client = client or get_client()
    correlation_id = correlation_id or str(uuid.uuid4())

    reference_text = None
    if request.reference_url:
        reference_text = await fetch_reference_text(request.reference_url)

    chain = client.model_chain
    llm_request = LLMRequest(
        messages=build_messages(request, reference_text),
        model=chain[0] if chain else "",
        temperature=GENERATION_TEMPERATURE,
        max_tokens=GENERATION_MAX_TOKENS,
        metadata={"format": request.format, "category": request.category},
    )

    logger.info(
        "Generating content",
        extra={
            "correlation_id": correlation_id,
            "format": request.format,
            "model": llm_request.model,
        },
    )
    response = await client.generate(llm_request, correlation_id=correlation_id)
    generated = to_generated_content(response)

    logger.info(
        f"Generated {len(generated.content)} chars with {len(generated.suggestions)} suggestions",
        extra={"correlation_id": correlation_id, "model": response.model, "provider": response.provider},
    )
    return generated
