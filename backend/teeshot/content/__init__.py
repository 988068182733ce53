"""Parsing of generated content.

Raw generator output flows through `clean_content` -> `detect_format` ->
`segment`; the renderer (`teeshot.content.renderer`) and the spreadsheet row
builder (`teeshot.content.spreadsheet`) consume the result.
"""

from .cleaning import clean_content, normalize_prompt, split_suggestions
from .detector import ContentFormat, detect_format
from .markers import BannerFieldKind, MarkerKind
from .segmenter import classify_line, collect_image_prompts, parse_content, segment
from .segments import Segment
from .sources import Citation

__all__ = [
    "BannerFieldKind",
    "Citation",
    "ContentFormat",
    "MarkerKind",
    "Segment",
    "classify_line",
    "clean_content",
    "collect_image_prompts",
    "detect_format",
    "normalize_prompt",
    "parse_content",
    "segment",
    "split_suggestions",
]
