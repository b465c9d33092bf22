"""Cleanup applied to parsed HTML before extraction and rendering.

Only markup that breaks Word layout is touched: scripts, vertical writing
and rotation styles, invisible characters and right-to-left direction.
Table styling, colours and borders are left alone.
"""
from __future__ import annotations

import logging
import re
import tempfile
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup, NavigableString
from bs4.element import PreformattedString

LOGGER = logging.getLogger(__name__)

ZERO_WIDTH_RE = re.compile(r"[\u200B-\u200D\uFEFF]")
INVISIBLE_RE = re.compile(r"[\u2000-\u200F\u2028-\u202F\u205F-\u206F]")
WHITESPACE_RE = re.compile(r"\s+")

PROBLEM_STYLE_RES = (
    re.compile(r"writing-mode\s*:\s*[^;]+;?", re.IGNORECASE),
    re.compile(r"transform\s*:\s*[^;]+;?", re.IGNORECASE),
    re.compile(r"text-orientation\s*:\s*[^;]+;?", re.IGNORECASE),
)
DOUBLE_SEMICOLON_RE = re.compile(r";\s*;+")


def parse_html(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "lxml")


def clean_text(text: str) -> str:
    """Remove zero-width marks, map NBSP/invisible spaces to blanks and collapse runs."""
    text = ZERO_WIDTH_RE.sub("", text)
    text = text.replace("\u00A0", " ")
    text = INVISIBLE_RE.sub(" ", text)
    return WHITESPACE_RE.sub(" ", text)


def clean_style(style: str) -> str:
    lowered = style.lower()
    vertical = "writing-mode" in lowered or "text-orientation" in lowered
    rotated = "transform" in lowered and "rotate" in lowered
    if not (vertical or rotated):
        return style
    for pattern in PROBLEM_STYLE_RES:
        style = pattern.sub("", style)
    style = DOUBLE_SEMICOLON_RE.sub(";", style)
    return style.strip()


def remove_scripts(soup: BeautifulSoup) -> int:
    scripts = soup.find_all("script")
    for node in scripts:
        node.decompose()
    return len(scripts)


def remove_problematic_styles(soup: BeautifulSoup) -> None:
    for node in soup.find_all(style=True):
        cleaned = clean_style(node.get("style", ""))
        if not cleaned:
            del node["style"]
        else:
            node["style"] = cleaned


def clean_special_characters(soup: BeautifulSoup) -> None:
    for node in list(soup.find_all(string=True)):
        if isinstance(node, PreformattedString) or not node.strip():
            continue
        if node.parent is not None and node.parent.name in ("style", "pre"):
            continue
        cleaned = clean_text(str(node))
        if cleaned != str(node):
            node.replace_with(NavigableString(cleaned))


def normalize_text_direction(soup: BeautifulSoup) -> None:
    body = soup.body
    if body is None:
        return
    body["dir"] = "ltr"
    for node in soup.find_all(attrs={"dir": "rtl"}):
        del node["dir"]


def normalize_soup(soup: BeautifulSoup) -> BeautifulSoup:
    """Clean a parsed document in place and return it."""
    remove_scripts(soup)
    remove_problematic_styles(soup)
    clean_special_characters(soup)
    normalize_text_direction(soup)
    return soup


def preprocess_file(html_path: str, logger: Optional[logging.Logger] = None, temp_dir: Optional[str] = None) -> str:
    """Write a cleaned copy of ``html_path`` to the temp directory.

    Returns the cleaned file's path, or the original path when cleaning fails.
    """
    log = logger or LOGGER
    try:
        source = Path(html_path)
        soup = parse_html(source.read_text(encoding="utf-8", errors="replace"))
        normalize_soup(soup)
        target = Path(temp_dir or tempfile.gettempdir()) / f"cleaned_{source.name}"
        target.write_text(str(soup), encoding="utf-8")
        log.info("HTML preprocessed and saved to: %s", target)
        return str(target)
    except Exception:
        log.exception("Error preprocessing HTML")
        return html_path
