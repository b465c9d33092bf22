"""Heading classification for paragraphs in the output document.

A paragraph is a heading when its style is ``Heading 1``..``Heading 6`` or
when its formatting looks like one (bold, or 14pt and larger) and its text
reads like a title. The text rules live in :func:`looks_like_heading` so they
can be checked against literal examples without building a document.
"""
from __future__ import annotations

import re
from typing import Optional

from docx.text.paragraph import Paragraph

from .constants import (
    HEADING_HEURISTIC_MAX_LENGTH,
    HEADING_HEURISTIC_MIN_FONT_PT,
    KNOWN_HEADING_WORDS,
    MAJOR_SECTION_WORDS,
)

_HEADING_STYLE_RE = re.compile(r"^heading\s*([1-9])$", re.IGNORECASE)


def heading_level(paragraph: Paragraph) -> Optional[int]:
    """Level 1..6 taken from the paragraph style, or ``None``."""
    style = paragraph.style
    candidates = []
    if style is not None:
        candidates.extend([style.name or "", style.style_id or ""])
    for name in candidates:
        match = _HEADING_STYLE_RE.match(name.strip())
        if match:
            level = int(match.group(1))
            if 1 <= level <= 6:
                return level
    return None


def is_known_heading_text(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in KNOWN_HEADING_WORDS)


def is_known_major_section(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in MAJOR_SECTION_WORDS)


def looks_like_heading(text: str, bold: bool, font_size_pt: Optional[float]) -> bool:
    """Formatting heuristic: bold or large text that reads like a title."""
    text = (text or "").strip()
    if len(text) > HEADING_HEURISTIC_MAX_LENGTH or len(text) < 2:
        return False
    large = font_size_pt is not None and font_size_pt >= HEADING_HEURISTIC_MIN_FONT_PT
    if not (bold or large):
        return False
    return "." not in text or text.endswith(":") or is_known_heading_text(text)


def _effective_font(paragraph: Paragraph) -> tuple[bool, Optional[float]]:
    bold = False
    size: Optional[float] = None
    style = paragraph.style
    if style is not None and style.font is not None:
        bold = bool(style.font.bold)
        if style.font.size is not None:
            size = style.font.size.pt
    runs = [run for run in paragraph.runs if run.text.strip()]
    if runs:
        first = runs[0]
        if first.bold:
            bold = True
        if first.font.size is not None:
            size = max(size or 0.0, first.font.size.pt)
    return bold, size


def is_likely_heading_by_format(paragraph: Paragraph) -> bool:
    bold, size = _effective_font(paragraph)
    return looks_like_heading(paragraph.text, bold, size)


def is_heading(paragraph: Paragraph) -> bool:
    return heading_level(paragraph) is not None or is_likely_heading_by_format(paragraph)


def is_major_heading(paragraph: Paragraph) -> bool:
    level = heading_level(paragraph)
    if level is not None and level <= 2:
        return True
    return is_known_major_section(paragraph.text.strip())


__all__ = [
    "heading_level",
    "is_heading",
    "is_known_heading_text",
    "is_known_major_section",
    "is_likely_heading_by_format",
    "is_major_heading",
    "looks_like_heading",
]
