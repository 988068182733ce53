#!/usr/bin/env python3
"""Parse a saved generator output from the command line.

Prints the detected format with its segments, the render descriptors, or the
spreadsheet export line. Handy for checking how a new model's output is read
before it reaches the UI.

Usage:
    python scripts/parse_content.py output.txt
    python scripts/parse_content.py output.txt --mode tsv --category 레슨
    cat output.txt | python scripts/parse_content.py - --mode render --keyword 드라이버

Run from the repository root after `pip install -e .`.
"""

import argparse
import json
import sys
from pathlib import Path

from teeshot.services.presentation import export_view, parse_view

MODES = ("segments", "render", "tsv")


def read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Parse generated golf content into segments, descriptors or a TSV row",
    )
    parser.add_argument("input", help="Text file with raw generator output, or - for stdin")
    parser.add_argument(
        "--mode",
        choices=MODES,
        default="segments",
        help="What to print (default: segments)",
    )
    parser.add_argument(
        "--format",
        dest="format_hint",
        default=None,
        help='Format label hint, e.g. "NAVER-BLOG/BAND"',
    )
    parser.add_argument("--keyword", default=None, help="Keyword highlighted in titles (render mode)")
    parser.add_argument("--category", default="", help="Category cell value (tsv mode)")
    args = parser.parse_args()

    raw = read_input(args.input)

    if args.mode == "tsv":
        view = export_view(raw, hint=args.format_hint, category=args.category)
        if view.tsv is None:
            print("No content", file=sys.stderr)
            return 1
        if not view.exportable:
            print(f"Warning: {view.format.value} content has no spreadsheet template", file=sys.stderr)
        print(view.tsv)
        return 0

    view = parse_view(raw, hint=args.format_hint, keyword=args.keyword)
    payload = {
        "format": view.format.value,
        "image_prompts": view.image_prompts,
        "suggestions": view.suggestions,
    }
    if args.mode == "segments":
        payload["segments"] = [s.model_dump(mode="json") for s in view.segments]
    else:
        payload["descriptors"] = [d.model_dump(mode="json") for d in view.descriptors]

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
