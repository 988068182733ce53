"""Typed segments produced by the segmenter.

A segment is one contiguous, typed unit of parsed content. Segments are
frozen once emitted; the union is discriminated on `kind` so lists of
segments serialize cleanly through the API.

Pydantic v2. Extra fields are forbidden to prevent drift.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .markers import BannerFieldKind


class _Segment(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class TitleSegment(_Segment):
    kind: Literal["title"] = "title"
    lines: List[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class CardSegment(_Segment):
    """One card (card format) or scene (short-form video format)."""

    kind: Literal["card"] = "card"
    index: int = Field(ge=1, description="1-based card/scene number")
    heading: str = Field(description='Bracket text without brackets, e.g. "Card 1"')
    body_lines: List[str] = Field(default_factory=list)
    image_prompt: Optional[str] = None
    subtitle: Optional[str] = None
    source: Optional[str] = None


class BlogSectionSegment(_Segment):
    kind: Literal["blog_section"] = "blog_section"
    index: int = Field(ge=1)
    heading: str
    body_lines: List[str] = Field(default_factory=list)
    image_prompt: Optional[str] = None


TextBlockKind = Literal["intro", "summary", "conclusion", "references", "tags", "table_of_contents"]


class TextBlockSegment(_Segment):
    """Intro, summary, conclusion, references, tags or table of contents."""

    kind: TextBlockKind
    body_lines: List[str] = Field(default_factory=list)


class PostingTextSegment(_Segment):
    kind: Literal["posting_text"] = "posting_text"
    body_lines: List[str] = Field(default_factory=list)
    bgm: Optional[str] = None
    hashtags: List[str] = Field(default_factory=list)


class BannerFieldSegment(_Segment):
    kind: Literal["banner_field"] = "banner_field"
    field: BannerFieldKind
    lines: List[str] = Field(default_factory=list)


class HashtagLineSegment(_Segment):
    kind: Literal["hashtags"] = "hashtags"
    tags: List[str] = Field(default_factory=list)


class ImagePromptSegment(_Segment):
    """A standalone image marker not owned by a card or section."""

    kind: Literal["image_prompt"] = "image_prompt"
    prompt: str
    cover: bool = False


class KeywordsSegment(_Segment):
    kind: Literal["keywords"] = "keywords"
    text: str


class MarkerHeadingSegment(_Segment):
    """A heading line rendered as-is (closing ✅ line, 🎬 scene line)."""

    kind: Literal["marker_heading"] = "marker_heading"
    text: str


class ParagraphSegment(_Segment):
    """Catch-all for a line that belongs to no open segment."""

    kind: Literal["paragraph"] = "paragraph"
    text: str


Segment = Annotated[
    Union[
        TitleSegment,
        CardSegment,
        BlogSectionSegment,
        TextBlockSegment,
        PostingTextSegment,
        BannerFieldSegment,
        HashtagLineSegment,
        ImagePromptSegment,
        KeywordsSegment,
        MarkerHeadingSegment,
        ParagraphSegment,
    ],
    Field(discriminator="kind"),
]
