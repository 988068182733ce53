"""Pre-parse cleanup of raw generator output.

The generator sometimes echoes its request as a fenced JSON block or a bare
JSON object and prefixes the answer with a format label. Those fragments are
never content and are removed before any parsing happens.
"""

import re

from .markers import COVER_SUFFIX, FORMAT_LABELS, IMAGE_PROMPT, SUGGESTIONS_LINE

JSON_FENCE_RE = re.compile(r"```json[\s\S]*?```")
FORMAT_LABEL_RE = re.compile(
    r"^[A-D]\)\s+(" + "|".join(re.escape(label) for label in FORMAT_LABELS) + r"):\s*",
    re.MULTILINE,
)
REQUEST_ECHO_RE = re.compile(r'^\{[\s\S]*?"생성요청"[\s\S]*?\}', re.MULTILINE)
SUGGESTIONS_RE = re.compile(re.escape(SUGGESTIONS_LINE) + r"\s*(.*)", re.IGNORECASE)


def clean_content(raw: str | None) -> str:
    """Strip JSON echoes and format labels, then trim.

    Args:
        raw: Text exactly as returned by the generator.

    Returns:
        Text ready for line-by-line segmentation. Never raises.
    """
    if not raw:
        return ""
    text = JSON_FENCE_RE.sub("", raw)
    text = FORMAT_LABEL_RE.sub("", text)
    text = REQUEST_ECHO_RE.sub("", text)
    return text.strip()


def split_suggestions(raw: str) -> tuple[str, list[str]]:
    """Separate the trailing follow-up suggestions line from the content.

    Returns:
        Tuple of (content without the suggestions line, suggestions).
    """
    match = SUGGESTIONS_RE.search(raw)
    if not match or not match.group(1):
        return raw, []
    suggestions = [s.strip() for s in match.group(1).split(",") if s.strip()]
    content = SUGGESTIONS_RE.sub("", raw, count=1).strip()
    return content, suggestions


def normalize_prompt(text: str) -> str:
    """Reduce an image-prompt line (or bare prompt) to its status-map key."""
    return text.strip().replace(IMAGE_PROMPT, "").replace(COVER_SUFFIX, "").strip()


def split_lines(text: str) -> list[str]:
    """Split on newlines, tolerating CRLF input."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
