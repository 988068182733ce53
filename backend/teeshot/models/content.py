"""Content generation request and result models.

A ContentRequest carries everything the form collects; GeneratedContent is
what the text generator returned once the suggestions line was split off.

Pydantic v2. Extra fields are forbidden to prevent drift.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from teeshot.content.markers import FORMAT_BANNER, FORMAT_BLOG, FORMAT_CARD, FORMAT_SHORTFORM
from teeshot.content.sources import Citation

FormatLabel = Literal["INSTAGRAM-CARD", "NAVER-BLOG/BAND", "YOUTUBE-SHORTFORM", "ETC-BANNER"]

DARK_THEME = "다크모드"


class ContentRequest(BaseModel):
    """Generation parameters collected by the form."""

    model_config = ConfigDict(extra="forbid")

    format: FormatLabel = Field(default=FORMAT_CARD, description="Target content format")
    category: str = Field(default="", description="Content category")
    keyword: str = Field(default="", description="Keyword or topic")
    user_text: str = Field(default="", description="Free text from the user")
    reference_url: Optional[str] = Field(default=None, description="Page whose text is used as reference")

    card_count: int = Field(default=6, ge=3, le=10, description="Cards in a card carousel")
    blog_length: int = Field(default=1000, ge=500, le=4000, description="Target text length (blog, banner)")
    section_count: int = Field(default=5, ge=1, le=10, description="Body sections in a blog post")
    video_length: int = Field(default=30, ge=5, le=60, description="Short-form video length in seconds")
    scene_count: int = Field(default=6, ge=1, le=20)
    tone: str = Field(default="", description="Tone and manner")

    # Banner/poster only
    aspect_ratio: Optional[str] = None
    theme: Optional[str] = Field(default=None, description=f'"{DARK_THEME}" selects dark background')
    style: Optional[str] = None
    alignment: Optional[str] = None
    image_generator_tool: Optional[str] = Field(default=None, description="Image model the prompts target")
    headline: Optional[str] = None
    subheadline: Optional[str] = None
    body_copy: Optional[str] = None
    cta: Optional[str] = None

    is_golf_related: bool = True

    @property
    def is_banner(self) -> bool:
        return self.format == FORMAT_BANNER

    @property
    def is_blog(self) -> bool:
        return self.format == FORMAT_BLOG

    @property
    def is_card(self) -> bool:
        return self.format == FORMAT_CARD

    @property
    def is_shortform(self) -> bool:
        return self.format == FORMAT_SHORTFORM


class GeneratedContent(BaseModel):
    """Text returned by the generator, split into content and suggestions."""

    model_config = ConfigDict(extra="forbid")

    content: str = Field(description="Generated text with the suggestions line removed")
    suggestions: List[str] = Field(default_factory=list, description="Follow-up topic suggestions")
    sources: List[Citation] = Field(default_factory=list, description="Web sources cited by the model")
    model: Optional[str] = Field(default=None, description="Model that produced the text")
