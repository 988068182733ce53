"""Spreadsheet row builder.

Produces one flat row of string cells per piece of content, laid out to match
the team's existing spreadsheet templates, and the tab-separated line that is
pasted into them.

The row builder re-reads the cleaned text with its own small state machines
instead of reusing the display segments: the export grouping differs from the
display grouping (title continuation, card body filtering, the references
block captured by a regex rather than by markers).

Card layout (63 cells, fixed offsets):

    0      wrapped title
    1      category
    2-4    hashtag 1-3
    5      cover thumbnail URL
    6      ''
    7-55   ten card blocks of (subtitle, body, thumbnail URL, source),
           each followed by '' except the last
    56     ''
    57     posting text
    58     core keywords
    59     sources text
    60     ''
    61-62  full content, first and second half

Blog layout:

    category, title, intro, content half 1, content half 2,
    references + tags, summary, conclusion, image URL 1..n
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from . import markers as m
from .cleaning import clean_content, normalize_prompt, split_lines
from .detector import ContentFormat
from .image_status import ImageStatusMap
from .sources import Citation, format_citations

TITLE_MAX_CHARS = 30
TITLE_LINE_WIDTH = 10
TITLE_MAX_LINES = 3

CARD_SLOTS = 10
CARD_BLOCK_WIDTH = 4
POSTING_TEXT_COL = 57
KEYWORDS_COL = 58
SOURCES_COL = 59
FULL_CONTENT_COL = 61
CARD_ROW_WIDTH = FULL_CONTENT_COL + 2

SOURCES_BLOCK_RE = re.compile(
    re.escape(m.REFERENCES_HEADER) + r"\n([\s\S]*?)(?=\n" + re.escape(m.SUGGESTIONS_LINE) + r"|\Z)"
)

# Lines starting with one of these never count as blog body text
BLOG_MARKER_GLYPHS = ("✅", "✔", "📸", "📌", "🟦", "🟧", "🟪", "🔎", "🟫", "🔹")
TOC_HEADER_RE = re.compile(r"^\[\s*목차\s*\]", re.IGNORECASE)

EXPORTABLE_FORMATS = frozenset({ContentFormat.card, ContentFormat.blog})


def is_exportable(fmt: ContentFormat) -> bool:
    """Only card and blog content have a spreadsheet template."""
    return fmt in EXPORTABLE_FORMATS


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def escape_cell(value: Optional[str]) -> str:
    """Quote a cell containing a tab, newline or double quote (RFC 4180 style)."""
    value = value or ""
    if "\t" in value or "\n" in value or "\r" in value or '"' in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def to_tsv(cells: Sequence[str]) -> str:
    return "\t".join(escape_cell(cell) for cell in cells)


def wrap_title(
    text: Optional[str],
    line_width: int = TITLE_LINE_WIDTH,
    max_chars: int = TITLE_MAX_CHARS,
    max_lines: int = TITLE_MAX_LINES,
) -> str:
    """Truncate a title to `max_chars` and wrap it onto at most `max_lines` lines.

    Truncation keeps whole words where it can. Lines break on spaces near (not
    past) `line_width`; a word longer than `line_width` gets a line of its own
    and is never split.
    """
    text = (text or "").strip()
    if not text:
        return ""

    if len(text) > max_chars:
        kept = ""
        for word in text.split():
            candidate = f"{kept} {word}" if kept else word
            if len(candidate) > max_chars:
                break
            kept = candidate
        text = kept or text[:max_chars].strip()

    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= line_width:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = word
        else:
            lines.append(word)
            current = ""
        if len(lines) >= max_lines:
            break

    if current and len(lines) < max_lines:
        lines.append(current)
    return "\n".join(lines[:max_lines])


def split_halves(text: str) -> tuple[str, str]:
    """Split text into two cells; the first half gets the extra character."""
    mid = (len(text) + 1) // 2
    return text[:mid], text[mid:]


def _pad_to(row: list[str], index: int) -> None:
    if len(row) < index:
        row.extend([""] * (index - len(row)))


def _remote_url(statuses: ImageStatusMap, prompt: str) -> str:
    if not prompt:
        return ""
    return statuses.get(prompt).remote_url or ""


# ---------------------------------------------------------------------------
# Card format
# ---------------------------------------------------------------------------


@dataclass
class CardRowData:
    subtitle: str = ""
    body_lines: List[str] = field(default_factory=list)
    prompt: str = ""
    source: str = ""

    @property
    def body(self) -> str:
        return "\n".join(self.body_lines).strip()


@dataclass
class CardExport:
    title: str = ""
    cover_prompt: str = ""
    cards: List[CardRowData] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
    posting_lines: List[str] = field(default_factory=list)
    keywords: str = ""

    @property
    def posting_text(self) -> str:
        return "\n".join(self.posting_lines).strip()


def _ends_card_title(text: str) -> bool:
    return (
        text.startswith(m.CARD_META)
        or text.startswith(m.IMAGE_PROMPT)
        or text.startswith("[Card")
        or text.startswith("[Scene")
        or text.startswith(m.SUBTITLE)
    )


def parse_card_export(cleaned: str) -> CardExport:
    """Collect the card-template fields from cleaned card content."""
    data = CardExport()
    title_parts: list[str] = []
    in_title = False
    in_posting = False
    before_cards = True
    card: Optional[CardRowData] = None

    for line in split_lines(cleaned):
        text = line.strip()

        if text.startswith(m.POSTING):
            in_posting, in_title, before_cards = True, False, False
            card = None
            continue

        if in_posting:
            if text.startswith(m.SUGGESTIONS_LINE) or text.startswith(m.REFERENCES_HEADER):
                in_posting = False
            elif text.startswith(m.KEYWORDS):
                in_posting = False
                data.keywords = m.parse_keywords(text)
            else:
                data.posting_lines.append(line.rstrip())
            continue

        if text.startswith(m.KEYWORDS):
            data.keywords = m.parse_keywords(text)
            continue

        if m.TITLE_RE.match(text):
            in_title = True
            rest = m.strip_title_marker(text)
            if rest:
                title_parts.append(rest)
            continue

        if in_title:
            if _ends_card_title(text):
                in_title = False
            elif text and not text.startswith(m.HASHTAG):
                title_parts.append(text)
                continue

        if text.startswith("[Card") or text.startswith("[Scene"):
            card = CardRowData()
            data.cards.append(card)
            before_cards = False
        elif text.startswith(m.IMAGE_PROMPT):
            if before_cards:
                data.cover_prompt = normalize_prompt(text)
            elif card is not None and not card.prompt:
                card.prompt = normalize_prompt(text)
        elif text.startswith(m.SUBTITLE):
            if card is not None:
                card.subtitle = text.replace(m.SUBTITLE, "").strip()
        elif text.startswith(m.SOURCE):
            if card is not None:
                card.source = m.parse_source(text)
        elif text.startswith(m.HASHTAG):
            data.hashtags = m.parse_hashtags(text)
        elif card is not None and text and not text.startswith(m.CARD_META):
            card.body_lines.append(text)

    data.title = " ".join(title_parts).strip()
    return data


def _sources_text(cleaned: str, citations: Sequence[Citation]) -> str:
    match = SOURCES_BLOCK_RE.search(cleaned)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return format_citations(citations)


def build_card_row(
    cleaned: str,
    statuses: ImageStatusMap,
    category: str = "",
    citations: Sequence[Citation] = (),
) -> list[str]:
    data = parse_card_export(cleaned)
    tags = data.hashtags + [""] * 3

    row: list[str] = [
        wrap_title(data.title),
        category or "",
        tags[0],
        tags[1],
        tags[2],
        _remote_url(statuses, data.cover_prompt),
        "",
    ]
    for i in range(CARD_SLOTS):
        if i < len(data.cards):
            card = data.cards[i]
            row.extend([card.subtitle, card.body, _remote_url(statuses, card.prompt), card.source])
        else:
            row.extend([""] * CARD_BLOCK_WIDTH)
        if i < CARD_SLOTS - 1:
            row.append("")

    _pad_to(row, POSTING_TEXT_COL)
    row.append(data.posting_text)
    row.append(data.keywords)
    _pad_to(row, SOURCES_COL)
    row.append(_sources_text(cleaned, citations))
    _pad_to(row, FULL_CONTENT_COL)
    row.extend(split_halves(cleaned))
    return row


# ---------------------------------------------------------------------------
# Blog format
# ---------------------------------------------------------------------------


class BlogMode(str, Enum):
    none = "none"
    title = "title"
    intro = "intro"
    section = "section"
    summary = "summary"
    conclusion = "conclusion"
    references = "references"
    tags = "tags"


@dataclass
class BlogExport:
    title: str = ""
    intro: List[str] = field(default_factory=list)
    sections: List[List[str]] = field(default_factory=list)
    summary: List[str] = field(default_factory=list)
    conclusion: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @property
    def references_and_tags(self) -> str:
        parts = ["\n".join(self.references), "\n".join(self.tags)]
        return "\n\n".join(part for part in parts if part)


def _is_blog_title(text: str) -> bool:
    return bool(m.BLOG_TITLE_RE.match(text) or m.TITLE_RE.match(text))


def _blog_mode_for(text: str) -> Optional[BlogMode]:
    """Mode a marker line switches to, or None for a non-marker line."""
    if text.startswith(m.INTRO_CHECK) or text.startswith(m.INTRO):
        return BlogMode.intro
    if text.startswith(m.TOC) or (text.startswith(m.PIN) and m.TOC_WORD in text):
        return BlogMode.none
    if text.startswith(m.BODY) or text.startswith(m.BODY_SQUARE):
        return BlogMode.none
    if text.startswith(m.SECTION_BRACKET) or (
        text.startswith(m.SECTION_DIAMOND) and m.SECTION_DIAMOND_RE.match(text)
    ):
        return BlogMode.section
    if text.startswith(m.SUMMARY_SQUARE) or m.SUMMARY_WORD in text:
        return BlogMode.summary
    if text.startswith(m.CONCLUSION_SQUARE) or (
        text.startswith(m.CONCLUSION_WORD) and m.CONCLUSION_EXCLUDE not in text
    ):
        return BlogMode.conclusion
    if text.startswith(m.REFERENCES_HEADER):
        return BlogMode.references
    if text.startswith(m.TAGS_SQUARE) or text.startswith(m.TAGS_WORD):
        return BlogMode.tags
    if text.startswith(m.SUGGESTIONS_LINE):
        return BlogMode.none
    return None


def parse_blog_export(cleaned: str) -> BlogExport:
    """Collect the blog-template fields from cleaned blog content."""
    data = BlogExport()
    title_parts: list[str] = []
    mode = BlogMode.none

    for line in split_lines(cleaned):
        text = line.strip()

        if _is_blog_title(text):
            mode = BlogMode.title
            rest = m.strip_title_marker(text)
            if rest:
                title_parts.append(rest)
            continue

        if mode is BlogMode.title:
            if not text or text.startswith(m.HASHTAG):
                continue
            is_marker = text.startswith(BLOG_MARKER_GLYPHS) or _blog_mode_for(text) is not None
            if not is_marker:
                title_parts.append(text)
                continue
            mode = BlogMode.none

        next_mode = _blog_mode_for(text)
        if next_mode is not None:
            mode = next_mode
            if mode is BlogMode.section:
                data.sections.append([])
            continue

        if text.startswith(m.IMAGE_PROMPT):
            continue
        if not text or text.startswith(BLOG_MARKER_GLYPHS) or TOC_HEADER_RE.match(text):
            continue

        if mode is BlogMode.intro:
            if not m.TOC_ITEM_RE.match(text) and not m.is_intro_noise(text):
                data.intro.append(text)
        elif mode is BlogMode.section:
            data.sections[-1].append(text)
        elif mode is BlogMode.summary:
            data.summary.append(text)
        elif mode is BlogMode.conclusion:
            data.conclusion.append(text)
        elif mode is BlogMode.references:
            data.references.append(text)
        elif mode is BlogMode.tags:
            data.tags.append(text)

    data.title = " ".join(title_parts).strip()
    return data


def blog_image_urls(cleaned: str, statuses: ImageStatusMap) -> list[str]:
    """Durable URLs of every distinct image prompt, in first-seen order."""
    urls: list[str] = []
    seen: set[str] = set()
    for line in split_lines(cleaned):
        text = line.strip()
        if not text.startswith(m.IMAGE_PROMPT):
            continue
        prompt = normalize_prompt(text)
        if not prompt or prompt in seen:
            continue
        seen.add(prompt)
        url = _remote_url(statuses, prompt)
        if url:
            urls.append(url)
    return urls


def build_blog_row(cleaned: str, statuses: ImageStatusMap, category: str = "") -> list[str]:
    data = parse_blog_export(cleaned)
    half1, half2 = split_halves(cleaned)
    return [
        category or "",
        data.title,
        "\n".join(data.intro),
        half1,
        half2,
        data.references_and_tags,
        "\n".join(data.summary),
        "\n".join(data.conclusion),
        *blog_image_urls(cleaned, statuses),
    ]


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def build_row(
    raw: Optional[str],
    fmt: ContentFormat,
    statuses: Optional[ImageStatusMap] = None,
    category: str = "",
    citations: Sequence[Citation] = (),
) -> Optional[list[str]]:
    """Build the spreadsheet row for `raw` content.

    Args:
        raw: Raw or cleaned generator output.
        fmt: Detected content format. Blog content uses the blog layout;
            every other format uses the card layout.
        statuses: Prompt -> image status lookup; only remote URLs are exported.
        category: Category chosen in the request.
        citations: Provider citations, used when the content has no
            references block of its own.

    Returns:
        The row, or None when there is no content.
    """
    cleaned = clean_content(raw)
    if not cleaned:
        return None
    statuses = statuses or ImageStatusMap()
    if fmt is ContentFormat.blog:
        return build_blog_row(cleaned, statuses, category)
    return build_card_row(cleaned, statuses, category, citations)


def export_tsv(
    raw: Optional[str],
    fmt: ContentFormat,
    statuses: Optional[ImageStatusMap] = None,
    category: str = "",
    citations: Sequence[Citation] = (),
) -> Optional[str]:
    """Tab-separated export line, or None when there is no content."""
    row = build_row(raw, fmt, statuses, category, citations)
    return to_tsv(row) if row is not None else None
