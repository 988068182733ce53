"""Build the user prompt sent alongside SYSTEM_PROMPT.

The user prompt is a labeled-field form ("형식: ...", "카테고리: ...") filled
from a ContentRequest. Banner requests carry extra rules that force short
copy to be reproduced verbatim.
"""

from __future__ import annotations

from typing import Optional

from teeshot.models import ContentRequest
from teeshot.models.content import DARK_THEME

from .prompts import (
    DARK_THEME_NOTE,
    FIELD_EXPANDABLE,
    FIELD_MISSING,
    FIELD_VERBATIM_RULES,
    HEADLINE_VERBATIM_RULES,
    IMAGE_TOOL_NOTE,
    LIGHT_THEME_NOTE,
    NON_GOLF_NOTE,
    REFERENCE_BLOCK,
    USER_PROMPT_HEADER,
    VERBATIM_THRESHOLD,
)


def _banner_copy_field(label: str, value: Optional[str]) -> str:
    if not value or not value.strip():
        return FIELD_MISSING.format(label=label)

    length = len(value)
    out = f'{label}: "{value}"\n'
    if length > VERBATIM_THRESHOLD:
        out += FIELD_VERBATIM_RULES.format(label=label, length=length, value=value)
    else:
        out += FIELD_EXPANDABLE.format(label=label, length=length)
    return out


def _banner_copy(request: ContentRequest) -> str:
    headline = request.headline or ""
    out = f'헤드라인: "{headline}"\n'
    if len(headline) > VERBATIM_THRESHOLD:
        out += HEADLINE_VERBATIM_RULES.format(length=len(headline), headline=headline)
    else:
        out += FIELD_EXPANDABLE.format(label="헤드라인", length=len(headline))

    out += _banner_copy_field("서브헤드라인", request.subheadline)

    if request.body_copy and request.body_copy.strip():
        out += f"바디카피: {request.body_copy}\n"
        out += f"바디카피 글자 수: {len(request.body_copy)}자\n"
        out += "✅ 입력된 바디카피를 그대로 사용하세요.\n"
    else:
        out += FIELD_MISSING.format(label="바디카피")

    out += _banner_copy_field("CTA", request.cta)
    return out


def _banner_options(request: ContentRequest) -> str:
    out = ""
    if request.aspect_ratio:
        out += f"기본 비율: {request.aspect_ratio}\n"
    if request.theme:
        out += f"테마: {request.theme}\n"
        out += DARK_THEME_NOTE if request.theme == DARK_THEME else LIGHT_THEME_NOTE
    if request.style:
        out += f"시각적 스타일: {request.style}\n"
    if request.alignment:
        out += f"정렬 옵션: {request.alignment}\n"
    if request.image_generator_tool:
        out += f"이미지 생성 프롬프트 모델: {request.image_generator_tool}\n"
        out += IMAGE_TOOL_NOTE.format(tool=request.image_generator_tool)
    return out


def build_user_prompt(request: ContentRequest, reference_text: Optional[str] = None) -> str:
    """Fill the labeled-field form for one generation request.

    Args:
        request: Form values.
        reference_text: Text already fetched from `request.reference_url`.
            Ignored when the request has no reference URL.

    Returns:
        User prompt text.
    """
    prompt = f"\n{USER_PROMPT_HEADER}\n\n형식: {request.format}\n"

    if request.is_banner:
        prompt += _banner_copy(request)
    else:
        prompt += f"카테고리: {request.category}\n"
        if request.keyword and request.keyword.strip():
            prompt += f"키워드/주제: {request.keyword}\n"
        if request.user_text:
            prompt += f"user_text: {request.user_text}\n"

    if request.reference_url:
        prompt += REFERENCE_BLOCK.format(url=request.reference_url, content=reference_text or "")

    if request.is_card:
        prompt += f"card_count: {request.card_count}\n"
    if request.is_blog or request.is_banner:
        prompt += f"text_length: {request.blog_length}\n"
        if request.is_blog:
            prompt += f"section_count: {request.section_count}\n"
    if request.is_shortform:
        prompt += f"video_length: {request.video_length}\n"
        prompt += f"scene_count: {request.scene_count}\n"

    if request.is_banner:
        prompt += _banner_options(request)

    if request.tone:
        prompt += f"톤앤매너: {request.tone}\n"
    if not request.is_golf_related:
        prompt += NON_GOLF_NOTE
    return prompt
