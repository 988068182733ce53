"""Assemble API views from content, image statuses and citations.

Shared by the stateless content endpoints (the client sends the text) and
the session endpoints (the text lives in a ContentSession).
"""

from __future__ import annotations

from typing import Optional, Sequence

from teeshot.content import (
    ContentFormat,
    clean_content,
    collect_image_prompts,
    detect_format,
    segment,
    split_suggestions,
)
from teeshot.content.renderer import render
from teeshot.content.sources import Citation
from teeshot.content.spreadsheet import build_row, is_exportable, to_tsv
from teeshot.models import (
    ContentSession,
    ExportResponse,
    ImageState,
    ImageStatus,
    ImageStatusMap,
    ParseContentResponse,
    SessionView,
)


def statuses_from_urls(image_urls: dict[str, str]) -> ImageStatusMap:
    """Status map in which every given prompt is ready with a durable URL."""
    return ImageStatusMap(
        {
            prompt: ImageStatus(state=ImageState.ready, remote_url=url)
            for prompt, url in image_urls.items()
            if url
        }
    )


def parse_view(
    raw: str,
    hint: Optional[str] = None,
    keyword: Optional[str] = None,
    citations: Sequence[Citation] = (),
    statuses: Optional[ImageStatusMap] = None,
    fmt: Optional[ContentFormat] = None,
) -> ParseContentResponse:
    """Segments, render descriptors and image prompts for `raw`.

    `fmt` skips detection when the format is already known.
    """
    content, suggestions = split_suggestions(raw or "")
    cleaned = clean_content(content)
    fmt = fmt or detect_format(cleaned, hint)
    segments = segment(cleaned, fmt)
    return ParseContentResponse(
        format=fmt,
        segments=segments,
        descriptors=render(segments, statuses, fmt, keyword, citations),
        image_prompts=collect_image_prompts(segments),
        suggestions=suggestions,
    )


def export_view(
    raw: str,
    hint: Optional[str] = None,
    statuses: Optional[ImageStatusMap] = None,
    category: str = "",
    citations: Sequence[Citation] = (),
    fmt: Optional[ContentFormat] = None,
) -> ExportResponse:
    """Spreadsheet row and TSV line for `raw`."""
    fmt = fmt or detect_format(clean_content(raw), hint)
    row = build_row(raw, fmt, statuses, category, citations)
    return ExportResponse(
        format=fmt,
        exportable=is_exportable(fmt),
        row=row,
        tsv=to_tsv(row) if row is not None else None,
    )


def session_view(session: ContentSession, image_prompts: list[str]) -> SessionView:
    generated = session.generated
    return SessionView(
        session_id=session.session_id,
        format=session.format,
        content=generated.content,
        suggestions=generated.suggestions,
        sources=generated.sources,
        model=generated.model,
        image_prompts=image_prompts,
        images=session.images.snapshot(image_prompts),
        created_at=session.created_at,
    )
