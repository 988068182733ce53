"""Source citations attached to generated content.

Citations come from two places: the text provider's URL citations (passed
alongside the content) and the lines of a 🔎 참고자료 block inside it.
"""

from __future__ import annotations

import re
from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field

URL_RE = re.compile(r"https?://[^\s)\]>]+")
BULLET_RE = re.compile(r"^(?:[•\-*]|\d+\.)\s*")


class Citation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    uri: str = Field(default="", description="Source URL")
    title: str = Field(default="", description="Display title of the source")

    def label(self) -> str:
        """One-line rendering: `title (uri)`, or whichever part exists."""
        if self.title and self.uri:
            return f"{self.title} ({self.uri})"
        return self.title or self.uri


def citation_from_line(line: str) -> Citation:
    """Pull the first URL out of a reference line; the rest becomes the title."""
    text = BULLET_RE.sub("", line.strip())
    match = URL_RE.search(text)
    if not match:
        return Citation(title=text)
    title = (text[: match.start()] + text[match.end():]).strip(" -:()[]")
    return Citation(uri=match.group(0), title=title)


def citations_from_lines(lines: Iterable[str]) -> List[Citation]:
    return [citation_from_line(line) for line in lines if line.strip()]


def format_citations(citations: Iterable[Citation]) -> str:
    """Newline-joined labels, skipping empty citations."""
    return "\n".join(label for label in (c.label() for c in citations) if label)
