"""Display renderer: segments -> presentational descriptors.

The renderer is a pure, total mapping. It never raises and never mutates the
segments or the status map it is given; image slots are resolved against the
status map at render time.
"""

from __future__ import annotations

import re
from typing import Annotated, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from . import markers as m
from .detector import ContentFormat
from .image_status import ImageState, ImageStatusMap
from .markers import BannerFieldKind
from .segmenter import banner_prompt
from .segments import (
    BannerFieldSegment,
    BlogSectionSegment,
    CardSegment,
    HashtagLineSegment,
    ImagePromptSegment,
    KeywordsSegment,
    MarkerHeadingSegment,
    ParagraphSegment,
    PostingTextSegment,
    Segment,
    TextBlockSegment,
    TitleSegment,
)
from .sources import Citation, citations_from_lines

BLOCK_LABELS = {
    "intro": "인트로",
    "table_of_contents": "목차",
    "summary": "핵심 요약",
    "conclusion": "결론",
    "references": "참고자료",
    "tags": "태그",
}

BANNER_LABELS = {
    BannerFieldKind.headline: "헤드라인",
    BannerFieldKind.subheadline: "서브헤드라인",
    BannerFieldKind.style: "스타일",
    BannerFieldKind.aspect_ratio: "비율",
    BannerFieldKind.design_concept: "디자인 컨셉",
    BannerFieldKind.text_elements: "텍스트 요소",
    BannerFieldKind.image_prompt: "이미지 프롬프트",
    BannerFieldKind.guidelines: "디자인 가이드라인",
}

POSTING_LABEL = "포스팅 글"

# Image slot affordance per status
SLOT_ACTIONS = {
    ImageState.idle: "generate",
    ImageState.pending: "busy",
    ImageState.ready: "download",
    ImageState.failed: "retry",
}


class _Descriptor(BaseModel):
    model_config = ConfigDict(extra="forbid")

    group: str = Field(default="body", description="Layout group hint, e.g. title, card-2, section-1")


class TextSpan(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    highlight: bool = False


class Heading(_Descriptor):
    kind: Literal["heading"] = "heading"
    text: str
    level: int = Field(ge=1, le=3)
    spans: List[TextSpan] = Field(default_factory=list)


class Paragraph(_Descriptor):
    kind: Literal["paragraph"] = "paragraph"
    text: str
    is_list_item: bool = False


class ImageSlot(_Descriptor):
    kind: Literal["image_slot"] = "image_slot"
    prompt: str
    state: ImageState = ImageState.idle
    action: str = "generate"
    local_url: Optional[str] = None
    remote_url: Optional[str] = None
    error: Optional[str] = None
    cover: bool = False


class CitationList(_Descriptor):
    kind: Literal["citation_list"] = "citation_list"
    entries: List[Citation] = Field(default_factory=list)


RenderDescriptor = Annotated[
    Union[Heading, Paragraph, ImageSlot, CitationList],
    Field(discriminator="kind"),
]


def highlight_spans(text: str, keyword: Optional[str]) -> List[TextSpan]:
    """Split `text` into spans, flagging every case-insensitive `keyword` hit."""
    keyword = (keyword or "").strip()
    if not keyword:
        return [TextSpan(text=text)]
    pattern = re.compile(f"({re.escape(keyword)})", re.IGNORECASE)
    return [
        TextSpan(text=part, highlight=bool(pattern.fullmatch(part)))
        for part in pattern.split(text)
        if part
    ]


class Renderer:
    """Maps one segment list to render descriptors for one format."""

    def __init__(
        self,
        statuses: Optional[ImageStatusMap] = None,
        fmt: ContentFormat = ContentFormat.default,
        keyword: Optional[str] = None,
        citations: Optional[Sequence[Citation]] = None,
    ):
        self._statuses = statuses or ImageStatusMap()
        self._fmt = fmt
        self._keyword = keyword
        self._citations = list(citations or [])
        self._rendered_references = False

    def render(self, segments: Sequence[Segment]) -> list[RenderDescriptor]:
        out: list[RenderDescriptor] = []
        for seg in segments:
            out.extend(self._render_segment(seg))

        if self._fmt is ContentFormat.blog and self._citations and not self._rendered_references:
            out.append(Heading(text=BLOCK_LABELS["references"], level=2, group="references"))
            out.append(CitationList(entries=self._citations, group="references"))
        return out

    def _render_segment(self, seg: Segment) -> list[RenderDescriptor]:
        if isinstance(seg, TitleSegment):
            text = seg.text
            return [Heading(text=text, level=1, spans=highlight_spans(text, self._keyword), group="title")]
        if isinstance(seg, CardSegment):
            return self._card(seg)
        if isinstance(seg, BlogSectionSegment):
            group = f"section-{seg.index}"
            out: list[RenderDescriptor] = [Heading(text=seg.heading, level=2, group=group)]
            out.extend(_paragraphs(seg.body_lines, group))
            if seg.image_prompt:
                out.append(self._slot(seg.image_prompt, group))
            return out
        if isinstance(seg, TextBlockSegment):
            return self._block(seg)
        if isinstance(seg, PostingTextSegment):
            return self._posting(seg)
        if isinstance(seg, BannerFieldSegment):
            return self._banner_field(seg)
        if isinstance(seg, HashtagLineSegment):
            return [Paragraph(text=_hashtag_text(seg.tags), group="hashtags")]
        if isinstance(seg, ImagePromptSegment):
            return [self._slot(seg.prompt, "cover" if seg.cover else "body", cover=seg.cover)]
        if isinstance(seg, KeywordsSegment):
            return [Paragraph(text=f"{m.KEYWORDS_LABEL} {seg.text}", group="keywords")]
        if isinstance(seg, MarkerHeadingSegment):
            return [Heading(text=seg.text, level=3)]
        if isinstance(seg, ParagraphSegment):
            return [Paragraph(text=seg.text, is_list_item=m.is_list_item(seg.text))]
        return []

    def _card(self, seg: CardSegment) -> list[RenderDescriptor]:
        group = f"card-{seg.index}"
        out: list[RenderDescriptor] = [Heading(text=seg.heading, level=2, group=group)]
        if seg.subtitle:
            out.append(Heading(text=seg.subtitle, level=3, group=group))
        out.extend(_paragraphs(seg.body_lines, group))
        if seg.image_prompt:
            out.append(self._slot(seg.image_prompt, group))
        if seg.source:
            out.append(Paragraph(text=f"{m.SOURCE} {seg.source}", group=group))
        return out

    def _block(self, seg: TextBlockSegment) -> list[RenderDescriptor]:
        if not seg.body_lines:
            return []
        if seg.kind == "table_of_contents" and self._fmt is ContentFormat.blog:
            return []

        group = seg.kind
        out: list[RenderDescriptor] = [Heading(text=BLOCK_LABELS[seg.kind], level=2, group=group)]
        if seg.kind == "references":
            self._rendered_references = True
            out.append(CitationList(entries=citations_from_lines(seg.body_lines), group=group))
            return out
        out.extend(_paragraphs(seg.body_lines, group))
        return out

    def _posting(self, seg: PostingTextSegment) -> list[RenderDescriptor]:
        group = "posting"
        out: list[RenderDescriptor] = [Heading(text=POSTING_LABEL, level=2, group=group)]
        out.extend(_paragraphs(seg.body_lines, group))
        if seg.bgm:
            out.append(Paragraph(text=f"{m.BGM_LABEL} {seg.bgm}", group=group))
        if seg.hashtags:
            out.append(Paragraph(text=_hashtag_text(seg.hashtags), group=group))
        return out

    def _banner_field(self, seg: BannerFieldSegment) -> list[RenderDescriptor]:
        group = f"banner-{seg.field.value}"
        out: list[RenderDescriptor] = [Heading(text=BANNER_LABELS[seg.field], level=3, group=group)]
        if seg.field is BannerFieldKind.image_prompt:
            prompt = banner_prompt(seg)
            if prompt:
                out.append(self._slot(prompt, group))
            return out
        out.extend(_paragraphs(seg.lines, group))
        return out

    def _slot(self, prompt: str, group: str, cover: bool = False) -> ImageSlot:
        status = self._statuses.get(prompt)
        return ImageSlot(
            prompt=prompt,
            state=status.state,
            action=SLOT_ACTIONS[status.state],
            local_url=status.local_url,
            remote_url=status.remote_url,
            error=status.error,
            cover=cover,
            group=group,
        )


def _paragraphs(lines: Sequence[str], group: str) -> list[RenderDescriptor]:
    return [Paragraph(text=line, is_list_item=m.is_list_item(line), group=group) for line in lines]


def _hashtag_text(tags: Sequence[str]) -> str:
    return " ".join(f"#{tag}" for tag in tags)


def render(
    segments: Sequence[Segment],
    statuses: Optional[ImageStatusMap] = None,
    fmt: ContentFormat = ContentFormat.default,
    keyword: Optional[str] = None,
    citations: Optional[Sequence[Citation]] = None,
) -> list[RenderDescriptor]:
    """Render segments to descriptors.

    Args:
        segments: Output of the segmenter.
        statuses: Prompt -> image status lookup (absent prompts are idle).
        fmt: Content format the segments were parsed with.
        keyword: Optional keyword highlighted in title headings.
        citations: Provider citations; blog content gets a trailing
            citation block when it has no references block of its own.

    Returns:
        Ordered list of descriptors (possibly empty).
    """
    return Renderer(statuses, fmt, keyword, citations).render(segments)
