"""Fetch reference page text for a generation request.

Only a rough text extraction is needed: the result is pasted into the user
prompt as background material. Any failure turns into an explanatory note so
that generation still goes ahead without the reference.
"""

from __future__ import annotations

import logging
import re

import httpx

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 15.0
MAX_TEXT_CHARS = 15000
MIN_TEXT_CHARS = 50
HTML_PREVIEW_CHARS = 5000

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# Main content regions, most specific first
CONTENT_REGION_RES = (
    re.compile(r"<main[^>]*>([\s\S]*?)</main>", re.IGNORECASE),
    re.compile(r"<article[^>]*>([\s\S]*?)</article>", re.IGNORECASE),
    re.compile(r'<div[^>]*class="[^"]*content[^"]*"[^>]*>([\s\S]*?)</div>', re.IGNORECASE),
    re.compile(r'<div[^>]*id="[^"]*content[^"]*"[^>]*>([\s\S]*?)</div>', re.IGNORECASE),
)

SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
NOSCRIPT_RE = re.compile(r"<noscript[^>]*>[\s\S]*?</noscript>", re.IGNORECASE)
COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
TAG_RE = re.compile(r"<[^>]+>")
ENTITY_RE = re.compile(r"&[a-z]+;", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"\s+")


def extract_main_region(html: str) -> str:
    """Return the first main-content region, or the whole document."""
    for pattern in CONTENT_REGION_RES:
        match = pattern.search(html)
        if match and match.group(1):
            return match.group(1)
    return html


def html_to_text(html: str) -> str:
    """Strip scripts, styles, comments and tags; collapse whitespace."""
    text = SCRIPT_RE.sub("", html)
    text = STYLE_RE.sub("", text)
    text = NOSCRIPT_RE.sub("", text)
    text = COMMENT_RE.sub("", text)
    text = TAG_RE.sub(" ", text)
    text = text.replace("&nbsp;", " ")
    text = ENTITY_RE.sub(" ", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def _preview_note(url: str, html: str) -> str:
    preview = STYLE_RE.sub("", SCRIPT_RE.sub("", html))[:HTML_PREVIEW_CHARS]
    return (
        f"URL: {url}\n\n"
        "페이지 내용이 제한적이거나 동적으로 로드되는 콘텐츠입니다. "
        f"다음은 페이지의 일부 내용입니다:\n\n{preview}"
    )


def _error_note(url: str, error: Exception) -> str:
    return f"URL 내용을 가져오는 중 오류가 발생했습니다: {error}\n\nURL: {url}"


async def fetch_reference_text(url: str, client: httpx.AsyncClient | None = None) -> str:
    """Download `url` and reduce it to prompt-ready text.

    Args:
        url: Page to fetch.
        client: Optional client to reuse (tests pass one with a mock transport).

    Returns:
        Extracted text capped at MAX_TEXT_CHARS, an HTML preview note when the
        page yields too little text, or an error note. Never raises.
    """
    try:
        if client is None:
            async with httpx.AsyncClient(
                timeout=FETCH_TIMEOUT_SECONDS, follow_redirects=True
            ) as owned:
                response = await owned.get(url, headers=REQUEST_HEADERS)
        else:
            response = await client.get(url, headers=REQUEST_HEADERS)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(
            f"Failed to fetch reference URL: {e}",
            extra={"url": url, "error_type": type(e).__name__},
        )
        return _error_note(url, e)

    html = response.text
    text = html_to_text(extract_main_region(html))[:MAX_TEXT_CHARS]
    logger.info(f"Fetched reference URL ({len(html)} bytes html, {len(text)} chars text)", extra={"url": url})

    if len(text) < MIN_TEXT_CHARS:
        logger.warning("Reference page yielded too little text, using HTML preview", extra={"url": url})
        return _preview_note(url, html)
    return text
