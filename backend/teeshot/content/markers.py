"""Line-prefix marker vocabulary emitted by the content generator.

The text generator is instructed to delimit every part of its output with
one of the prefixes below. Everything downstream (detector, segmenter,
row builder) decodes against this table, so the constants live in one place.
"""

import re
from enum import Enum


class MarkerKind(str, Enum):
    """Kind of marker a single line can carry."""

    suggestions = "suggestions"
    posting = "posting"
    keywords = "keywords"
    references = "references"
    source = "source"
    title = "title"
    card = "card"
    subtitle = "subtitle"
    image_prompt = "image_prompt"
    cover_header = "cover_header"
    hashtags = "hashtags"
    bgm = "bgm"
    intro = "intro"
    toc = "toc"
    body = "body"
    section = "section"
    summary = "summary"
    conclusion = "conclusion"
    tags = "tags"
    card_meta = "card_meta"
    closing = "closing"
    scene_heading = "scene_heading"
    banner_field = "banner_field"
    content = "content"


class BannerFieldKind(str, Enum):
    """Sub-fields of the banner/poster format."""

    headline = "headline"
    subheadline = "subheadline"
    style = "style"
    aspect_ratio = "aspect_ratio"
    design_concept = "design_concept"
    text_elements = "text_elements"
    image_prompt = "image_prompt"
    guidelines = "guidelines"


# Format labels used in requests and in the generator's leading label line
FORMAT_CARD = "INSTAGRAM-CARD"
FORMAT_BLOG = "NAVER-BLOG/BAND"
FORMAT_SHORTFORM = "YOUTUBE-SHORTFORM"
FORMAT_BANNER = "ETC-BANNER"
FORMAT_LABELS = (FORMAT_CARD, FORMAT_BLOG, FORMAT_SHORTFORM, FORMAT_BANNER)

# Plain prefixes
SUGGESTIONS = "후속 제안"
SUGGESTIONS_LINE = "후속 제안:"
POSTING = "✍️ 포스팅 글"
KEYWORDS = "🔑"
KEYWORDS_LABEL = "🔑 핵심키워드:"
REFERENCES = "🔎 참고"
REFERENCES_HEADER = "🔎 참고자료"
SOURCE = "🔎 출처:"
SELF_SOURCE = "자체 정보"
SUBTITLE = "💡 소제목:"
IMAGE_PROMPT = "📸 이미지 프롬프트:"
COVER_SUFFIX = "(표지용)"
CAMERA = "📸"
COVER_WORD = "대표"
HASHTAG = "#"
BGM = "🎵"
BGM_LABEL = "🎵 추천 BGM:"
INTRO = "✍️ 인트로"
INTRO_CHECK = "✔️"
TOC = "[목차]"
PIN = "📌"
TOC_WORD = "목차"
BODY = "📚 본문"
BODY_SQUARE = "🟦"
SECTION_BRACKET = "[섹션"
SECTION_DIAMOND = "🔹"
SUMMARY_SQUARE = "🟧"
SUMMARY_WORD = "핵심 요약"
CONCLUSION_SQUARE = "🟪"
CONCLUSION_WORD = "결론"
CONCLUSION_EXCLUDE = "참고"
TAGS_SQUARE = "🟫"
TAGS_WORD = "태그"
CARD_META = ("핵심 메시지", "카드 수", "카드별 콘텐츠")
CLOSING = "✅"
SCENE_HEADING = "🎬"

TITLE_RE = re.compile(r"^제목(\(.*\))?:\s*")
BLOG_TITLE_RE = re.compile(r"^✅\s*1\.\s*제목\s*")
CARD_RE = re.compile(r"^\[(Card|Scene)\s*(\d+)?[^\]]*\]\s*(.*)$")
CARD_BRACKET_RE = re.compile(r"\[Card\s*\d+\]")
SECTION_BRACKET_RE = re.compile(r"^\[섹션\s*(\d+)\s*제목\]\s*")
SECTION_BRACKET_ANY_RE = re.compile(r"\[섹션\s*\d+\s*제목\]")
SECTION_DIAMOND_RE = re.compile(r"^🔹\s*(\d+)\.\s*")
LIST_ITEM_RE = re.compile(r"^[•\-*]\s")
TOC_ITEM_RE = re.compile(r"^\d+\.\s")
SQUARE_BRACKET_LINE_RE = re.compile(r"^\[.*\]$")

# Banner fields, most specific first (서브헤드라인 before 헤드라인)
BANNER_FIELD_PATTERNS: tuple[tuple[BannerFieldKind, re.Pattern[str]], ...] = (
    (BannerFieldKind.subheadline, re.compile(r"^(?:🅱️\s*)?서브\s*헤드라인\s*:?\s*")),
    (BannerFieldKind.headline, re.compile(r"^(?:🅰️\s*)?헤드라인\s*:?\s*")),
    (BannerFieldKind.style, re.compile(r"^(?:🎨\s*)?(?:시각적\s*)?스타일\s*:\s*")),
    (BannerFieldKind.aspect_ratio, re.compile(r"^(?:📐\s*)?(?:기본\s*)?비율\s*:\s*")),
    (BannerFieldKind.design_concept, re.compile(r"^(?:🖼️\s*)?디자인\s*컨셉\s*:?\s*")),
    (BannerFieldKind.text_elements, re.compile(r"^(?:📝\s*)?텍스트\s*요소\s*:?\s*")),
    (BannerFieldKind.image_prompt, re.compile(r"^📸\s*이미지\s*프롬프트\s*:?\s*")),
    (BannerFieldKind.guidelines, re.compile(r"^(?:📋\s*)?(?:디자인\s*)?가이드라인\s*:?\s*")),
)

# Detector probes for the banner format
BANNER_DETECT_RE = re.compile(
    r"^(?:📐\s*)?(?:기본\s*)?비율\s*:|^(?:🎨\s*)?(?:시각적\s*)?스타일\s*:|^(?:🖼️\s*)?디자인\s*컨셉",
    re.MULTILINE,
)
BLOG_DETECT_RES = (
    SECTION_BRACKET_ANY_RE,
    re.compile(r"✍️ 인트로"),
    re.compile(r"✅\s*1\.\s*제목"),
)

# Intro lines that look like section explanations rather than content
INTRO_DENYLIST = (
    re.compile(r"^[✔️✅]\s*(문제|해결책|핵심키워드|키워드)"),
    re.compile(r"\(첫 문단\)|가장 중요한 영역|키워드 총.*회"),
    re.compile(r"^[•\-*]\s*(문제|해결책)"),
)


def is_list_item(line: str) -> bool:
    """Return True for bullet lines (•, - or * followed by whitespace)."""
    return bool(LIST_ITEM_RE.match(line.strip()))


def is_intro_noise(line: str) -> bool:
    """Return True for generator meta-commentary that should not show in the intro."""
    text = line.strip()
    return any(pattern.search(text) for pattern in INTRO_DENYLIST)


def strip_title_marker(line: str) -> str:
    """Remove the title prefix (either convention) and return the remainder."""
    text = BLOG_TITLE_RE.sub("", line.strip())
    return TITLE_RE.sub("", text).strip()


def parse_hashtags(line: str) -> list[str]:
    """Split a `#a #b` line into bare tags."""
    return [tag.strip() for tag in line.replace(HASHTAG, "").split(" ") if tag.strip()]


def parse_keywords(line: str) -> str:
    return line.strip().replace(KEYWORDS_LABEL, "").replace(KEYWORDS, "").strip()


def parse_source(line: str) -> str:
    """Return the card source text; the self-authored marker means no source."""
    text = line.strip().replace(SOURCE, "").strip()
    return "" if text == SELF_SOURCE else text


def parse_section_heading(line: str) -> tuple[int | None, str]:
    """Extract (index, heading) from a `[섹션 n 제목]` or `🔹 n.` line."""
    text = line.strip()
    match = SECTION_BRACKET_RE.match(text)
    if match:
        return int(match.group(1)), text[match.end():].strip()
    match = SECTION_DIAMOND_RE.match(text)
    if match:
        heading = text[match.end():].split("–")[0].strip()
        return int(match.group(1)), heading.strip("{} ")
    return None, text.lstrip("[").rstrip("]").strip()


def parse_card_heading(line: str) -> tuple[int | None, str]:
    """Extract (index, heading) from a `[Card n]` / `[Scene n]` line."""
    text = line.strip()
    match = CARD_RE.match(text)
    index = int(match.group(2)) if match and match.group(2) else None
    return index, text.replace("[", "").replace("]", "").strip()
