"""Line classifier and section segmenter.

Walks cleaned generator output once, line by line, and buckets lines into
typed segments. Exactly one segment is open at any time; any marker that
opens a new segment closes the open one first, so content never bleeds from
one segment into the next. The segmenter is total: every input produces a
(possibly empty) list of segments and nothing raises.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from . import markers as m
from .cleaning import clean_content, normalize_prompt, split_lines
from .detector import ContentFormat, detect_format
from .markers import BannerFieldKind, MarkerKind
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

logger = logging.getLogger(__name__)

# Markers that end a posting-text block; every other line belongs to it
POSTING_TERMINATORS = frozenset({MarkerKind.suggestions, MarkerKind.references, MarkerKind.keywords})

CLOSING_DEFAULT_TEXT = "마무리"


def _is_title(text: str, fmt: ContentFormat) -> bool:
    if m.TITLE_RE.match(text):
        return True
    return fmt is ContentFormat.blog and bool(m.BLOG_TITLE_RE.match(text))


def _is_intro(text: str, fmt: ContentFormat) -> bool:
    if text.startswith(m.INTRO):
        return True
    return fmt is ContentFormat.blog and text.startswith(m.INTRO_CHECK)


def _is_section(text: str, fmt: ContentFormat) -> bool:
    if text.startswith(m.SECTION_BRACKET):
        return True
    return text.startswith(m.SECTION_DIAMOND) and bool(m.SECTION_DIAMOND_RE.match(text))


# Fixed priority order. Closing-type markers come before opening-type ones.
_RULES: tuple[tuple[MarkerKind, Callable[[str, ContentFormat], bool]], ...] = (
    (MarkerKind.suggestions, lambda t, f: t.startswith(m.SUGGESTIONS)),
    (MarkerKind.posting, lambda t, f: t.startswith(m.POSTING)),
    (MarkerKind.keywords, lambda t, f: t.startswith(m.KEYWORDS)),
    (MarkerKind.references, lambda t, f: t.startswith(m.REFERENCES)),
    (MarkerKind.source, lambda t, f: t.startswith(m.SOURCE)),
    (MarkerKind.title, _is_title),
    (MarkerKind.card, lambda t, f: t.startswith("[Card") or t.startswith("[Scene")),
    (MarkerKind.subtitle, lambda t, f: t.startswith(m.SUBTITLE)),
    (MarkerKind.image_prompt, lambda t, f: t.startswith(m.IMAGE_PROMPT)),
    (MarkerKind.cover_header, lambda t, f: t.startswith(m.CAMERA) and m.COVER_WORD in t),
    (MarkerKind.hashtags, lambda t, f: t.startswith(m.HASHTAG)),
    (MarkerKind.intro, _is_intro),
    (MarkerKind.toc, lambda t, f: t.startswith(m.TOC) or (t.startswith(m.PIN) and m.TOC_WORD in t)),
    (MarkerKind.body, lambda t, f: t.startswith(m.BODY) or t.startswith(m.BODY_SQUARE)),
    (MarkerKind.section, _is_section),
    (MarkerKind.summary, lambda t, f: t.startswith(m.SUMMARY_SQUARE) or m.SUMMARY_WORD in t),
    (
        MarkerKind.conclusion,
        lambda t, f: t.startswith(m.CONCLUSION_SQUARE)
        or (t.startswith(m.CONCLUSION_WORD) and m.CONCLUSION_EXCLUDE not in t),
    ),
    (MarkerKind.tags, lambda t, f: t.startswith(m.TAGS_SQUARE) or t.startswith(m.TAGS_WORD)),
    (MarkerKind.card_meta, lambda t, f: t.startswith(m.CARD_META)),
    (MarkerKind.closing, lambda t, f: t.startswith(m.CLOSING)),
    (MarkerKind.scene_heading, lambda t, f: t.startswith(m.SCENE_HEADING)),
)


def classify_line(line: str, fmt: ContentFormat) -> MarkerKind:
    """Return the marker kind of a single line for the card/blog/default tables."""
    text = line.strip()
    for kind, matches in _RULES:
        if matches(text, fmt):
            return kind
    return MarkerKind.content


def classify_banner_line(line: str) -> tuple[MarkerKind, Optional[BannerFieldKind], str]:
    """Classify a banner-format line.

    Returns:
        Tuple of (marker kind, banner field kind or None, text after the marker).
    """
    text = line.strip()
    if text.startswith(m.SUGGESTIONS):
        return MarkerKind.suggestions, None, ""
    if m.TITLE_RE.match(text):
        return MarkerKind.title, None, m.strip_title_marker(text)
    for field_kind, pattern in m.BANNER_FIELD_PATTERNS:
        match = pattern.match(text)
        if match:
            return MarkerKind.banner_field, field_kind, text[match.end():].strip()
    if text.startswith(m.HASHTAG):
        return MarkerKind.hashtags, None, text
    return MarkerKind.content, None, text


@dataclass
class _OpenSegment:
    """Mutable builder for the one segment currently being filled."""

    kind: str
    lines: list[str] = field(default_factory=list)
    index: int = 0
    heading: str = ""
    image_prompt: Optional[str] = None
    subtitle: Optional[str] = None
    source: Optional[str] = None
    bgm: Optional[str] = None
    hashtags: list[str] = field(default_factory=list)
    banner_field: Optional[BannerFieldKind] = None

    def build(self) -> Optional[Segment]:
        if self.kind == "title":
            return TitleSegment(lines=self.lines) if self.lines else None
        if self.kind == "card":
            return CardSegment(
                index=self.index,
                heading=self.heading,
                body_lines=self.lines,
                image_prompt=self.image_prompt,
                subtitle=self.subtitle,
                source=self.source,
            )
        if self.kind == "blog_section":
            return BlogSectionSegment(
                index=self.index,
                heading=self.heading,
                body_lines=self.lines,
                image_prompt=self.image_prompt,
            )
        if self.kind == "posting_text":
            return PostingTextSegment(body_lines=self.lines, bgm=self.bgm, hashtags=self.hashtags)
        if self.kind == "banner_field":
            return BannerFieldSegment(field=self.banner_field, lines=self.lines)
        return TextBlockSegment(kind=self.kind, body_lines=self.lines)


class Segmenter:
    """Single-pass state machine over cleaned content.

    Usage:
        segments = Segmenter(ContentFormat.card).run(cleaned_text)
    """

    def __init__(self, fmt: ContentFormat):
        self._fmt = fmt
        self._segments: list[Segment] = []
        self._open: Optional[_OpenSegment] = None
        self._card_count = 0
        self._section_count = 0
        self._cover_pending = False
        self._handlers: dict[MarkerKind, Callable[[str], None]] = {
            MarkerKind.suggestions: self._on_suggestions,
            MarkerKind.posting: self._on_posting,
            MarkerKind.keywords: self._on_keywords,
            MarkerKind.references: lambda text: self._open_block("references"),
            MarkerKind.source: self._on_source,
            MarkerKind.title: self._on_title,
            MarkerKind.card: self._on_card,
            MarkerKind.subtitle: self._on_subtitle,
            MarkerKind.image_prompt: self._on_image_prompt,
            MarkerKind.cover_header: self._on_cover_header,
            MarkerKind.hashtags: self._on_hashtags,
            MarkerKind.intro: lambda text: self._open_block("intro"),
            MarkerKind.toc: lambda text: self._open_block("table_of_contents"),
            MarkerKind.body: lambda text: self._close(),
            MarkerKind.section: self._on_section,
            MarkerKind.summary: lambda text: self._open_block("summary"),
            MarkerKind.conclusion: lambda text: self._open_block("conclusion"),
            MarkerKind.tags: lambda text: self._open_block("tags"),
            MarkerKind.card_meta: lambda text: self._close(),
            MarkerKind.closing: self._on_closing,
            MarkerKind.scene_heading: self._on_scene_heading,
            MarkerKind.content: self._on_content,
        }

    def run(self, text: str) -> list[Segment]:
        for line in split_lines(text):
            self._feed(line)
        self._close()
        return self._segments

    # -- line dispatch -------------------------------------------------------

    def _feed(self, line: str) -> None:
        text = line.strip()
        if not text:
            return

        if self._fmt is ContentFormat.banner:
            self._feed_banner(text)
            return

        kind = classify_line(text, self._fmt)
        if self._is_open("posting_text") and kind not in POSTING_TERMINATORS:
            self._append_posting(text)
            return
        self._handlers[kind](text)

    def _feed_banner(self, text: str) -> None:
        kind, field_kind, rest = classify_banner_line(text)
        if kind is MarkerKind.suggestions:
            self._close()
        elif kind is MarkerKind.title:
            self._start(_OpenSegment(kind="title"))
            if rest:
                self._open.lines.append(rest)
        elif kind is MarkerKind.banner_field:
            self._start(_OpenSegment(kind="banner_field", banner_field=field_kind))
            if rest:
                self._open.lines.append(rest)
        elif kind is MarkerKind.hashtags:
            self._on_hashtags(text)
        elif self._open is not None:
            self._open.lines.append(text)
        else:
            self._emit(ParagraphSegment(text=text))

    # -- segment lifecycle ---------------------------------------------------

    def _is_open(self, kind: str) -> bool:
        return self._open is not None and self._open.kind == kind

    def _close(self) -> None:
        if self._open is None:
            return
        segment = self._open.build()
        self._open = None
        if segment is not None:
            self._segments.append(segment)

    def _start(self, builder: _OpenSegment) -> None:
        self._close()
        self._open = builder

    def _emit(self, segment: Segment) -> None:
        self._close()
        self._segments.append(segment)

    def _open_block(self, kind: str) -> None:
        self._start(_OpenSegment(kind=kind))

    # -- transitions ---------------------------------------------------------

    def _on_suggestions(self, text: str) -> None:
        self._close()

    def _on_posting(self, text: str) -> None:
        self._start(_OpenSegment(kind="posting_text"))

    def _append_posting(self, text: str) -> None:
        if text.startswith(m.BGM):
            self._open.bgm = text.replace(m.BGM_LABEL, "").replace(m.BGM, "").strip()
        elif text.startswith(m.HASHTAG):
            self._open.hashtags.extend(m.parse_hashtags(text))
        else:
            self._open.lines.append(text)

    def _on_keywords(self, text: str) -> None:
        self._emit(KeywordsSegment(text=m.parse_keywords(text)))

    def _on_source(self, text: str) -> None:
        if self._is_open("card"):
            self._open.source = m.parse_source(text) or None
        else:
            self._on_content(text)

    def _on_title(self, text: str) -> None:
        self._start(_OpenSegment(kind="title"))
        rest = m.strip_title_marker(text)
        if rest:
            self._open.lines.append(rest)

    def _on_card(self, text: str) -> None:
        index, heading = m.parse_card_heading(text)
        self._card_count = index or self._card_count + 1
        self._start(_OpenSegment(kind="card", index=self._card_count, heading=heading))

    def _on_subtitle(self, text: str) -> None:
        subtitle = text.replace(m.SUBTITLE, "").strip()
        if self._is_open("card"):
            self._open.subtitle = subtitle
        elif subtitle:
            self._emit(MarkerHeadingSegment(text=subtitle))

    def _on_image_prompt(self, text: str) -> None:
        prompt = normalize_prompt(text)
        cover = self._cover_pending or m.COVER_SUFFIX in text
        self._cover_pending = False
        if not prompt:
            return
        owner = self._open
        if owner is not None and owner.kind in ("card", "blog_section") and owner.image_prompt is None:
            owner.image_prompt = prompt
            return
        self._emit(ImagePromptSegment(prompt=prompt, cover=cover))

    def _on_cover_header(self, text: str) -> None:
        self._close()
        self._cover_pending = True

    def _on_hashtags(self, text: str) -> None:
        if self._is_open("tags"):
            self._open.lines.append(text)
            return
        self._emit(HashtagLineSegment(tags=m.parse_hashtags(text)))

    def _on_section(self, text: str) -> None:
        index, heading = m.parse_section_heading(text)
        self._section_count = index or self._section_count + 1
        self._start(_OpenSegment(kind="blog_section", index=self._section_count, heading=heading))

    def _on_closing(self, text: str) -> None:
        self._emit(MarkerHeadingSegment(text=text[len(m.CLOSING):].strip() or CLOSING_DEFAULT_TEXT))

    def _on_scene_heading(self, text: str) -> None:
        self._emit(MarkerHeadingSegment(text=text))

    def _on_content(self, text: str) -> None:
        builder = self._open
        if builder is None:
            self._emit(ParagraphSegment(text=text))
            return

        if builder.kind == "title" and self._fmt is ContentFormat.blog:
            # Blog titles are followed by bracketed placeholders and examples
            if m.SQUARE_BRACKET_LINE_RE.match(text) or text.startswith("예:"):
                return
        if builder.kind == "intro" and m.is_intro_noise(text):
            return
        builder.lines.append(text)


def segment(text: str, fmt: ContentFormat) -> list[Segment]:
    """Segment already-cleaned content with the given format's marker table."""
    return Segmenter(fmt).run(text or "")


def parse_content(raw: str | None, hint: str | None = None) -> tuple[ContentFormat, list[Segment]]:
    """Clean, detect and segment raw generator output in one call.

    Args:
        raw: Raw generator output.
        hint: Optional format label from the request.

    Returns:
        Tuple of (detected format, segments).
    """
    cleaned = clean_content(raw)
    fmt = detect_format(cleaned, hint)
    segments = segment(cleaned, fmt)
    logger.debug("Segmented content", extra={"format": fmt.value, "segment_count": len(segments)})
    return fmt, segments


def banner_prompt(seg: BannerFieldSegment) -> str:
    return normalize_prompt(" ".join(seg.lines))


def collect_image_prompts(segments: list[Segment]) -> list[str]:
    """Return every distinct image prompt in first-seen order.

    Identical prompt text shared by several cards yields one entry, so a
    batch generation produces (and pays for) one image per distinct prompt.
    """
    prompts: dict[str, None] = {}
    for seg in segments:
        prompt: Optional[str] = None
        if isinstance(seg, (CardSegment, BlogSectionSegment)):
            prompt = seg.image_prompt
        elif isinstance(seg, ImagePromptSegment):
            prompt = seg.prompt
        elif isinstance(seg, BannerFieldSegment) and seg.field is BannerFieldKind.image_prompt:
            prompt = banner_prompt(seg)
        if prompt:
            prompts.setdefault(prompt, None)
    return list(prompts)
