"""Content-format detection.

Runs before segmentation: the banner format uses a marker set disjoint from
the other formats, so the segmenter needs to know which table to use.
"""

from enum import Enum

from .markers import (
    BANNER_DETECT_RE,
    BLOG_DETECT_RES,
    CARD_BRACKET_RE,
    FORMAT_BANNER,
    FORMAT_BLOG,
)


class ContentFormat(str, Enum):
    """Parsing path for a piece of generated content."""

    card = "card"
    blog = "blog"
    banner = "banner"
    default = "default"


_HINTS = {
    FORMAT_BANNER: ContentFormat.banner,
    FORMAT_BLOG: ContentFormat.blog,
}


def detect_format(text: str | None, hint: str | None = None) -> ContentFormat:
    """Decide which parsing path applies to `text`.

    Priority: an explicit banner/blog hint wins; otherwise the text is probed
    for card brackets, then blog markers, then banner field markers.

    Args:
        text: Raw or cleaned generator output.
        hint: Optional format label from the request (e.g. "NAVER-BLOG/BAND").

    Returns:
        The detected ContentFormat (default when nothing matches).
    """
    if hint:
        hinted = _HINTS.get(hint.strip())
        if hinted is not None:
            return hinted

    if not text:
        return ContentFormat.default

    if CARD_BRACKET_RE.search(text):
        return ContentFormat.card
    if any(pattern.search(text) for pattern in BLOG_DETECT_RES):
        return ContentFormat.blog
    if BANNER_DETECT_RE.search(text):
        return ContentFormat.banner
    return ContentFormat.default
