"""Pull section text and the risk register out of an HTML status report."""
from __future__ import annotations

from datetime import datetime
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from .constants import (
    BULLET_MARKER,
    CURRENT_WEEK_KEYWORDS,
    NEXT_WEEK_KEYWORDS,
    RISK_KEYWORDS,
)
from .html_preprocessor import normalize_soup, parse_html
from .models import RiskRecord, StatusReport
from .structure import HtmlNode, HtmlTree, NodeKind, find_section, iter_section_body

LOGGER = logging.getLogger(__name__)

NEWLINES_RE = re.compile(r"[\r\n]+")
LEADING_WS_RE = re.compile(r"^\s+", re.MULTILINE)
MARKUP_RE = re.compile(r"<[^>]*>")

MIN_RISK_CELLS = 4


def format_extracted_content(content: str) -> str:
    """Collapse newline runs, strip each line's indent and trim the block."""
    content = MARKUP_RE.sub("", content or "")
    content = NEWLINES_RE.sub("\n", content)
    content = LEADING_WS_RE.sub("", content)
    return content.strip()


def _inline_text(value: str) -> str:
    return " ".join(value.split())


def _list_item_text(item: Tag) -> str:
    """Text of one ``li`` without the text of lists nested inside it."""
    parts = []
    for child in item.children:
        if isinstance(child, Tag) and child.name in ("ul", "ol"):
            continue
        parts.append(child.get_text() if isinstance(child, Tag) else str(child))
    return _inline_text("".join(parts))


class HtmlContentExtractor:
    """Reads Current-Week, Next-Week and Risks content from parsed HTML."""

    def __init__(self, logger: Optional[logging.Logger] = None, clock=datetime.now):
        self.logger = logger or LOGGER
        self._clock = clock

    # ------------------------------------------------------------------
    def load(self, html_path: str) -> BeautifulSoup:
        markup = Path(html_path).read_text(encoding="utf-8", errors="replace")
        return normalize_soup(parse_html(markup))

    # ------------------------------------------------------------------
    def extract_report(self, html_path: str) -> StatusReport:
        report = StatusReport(input_path=str(html_path))
        if not Path(html_path).is_file():
            self.logger.warning("HTML file not found: %s", html_path)
            return report
        try:
            soup = self.load(html_path)
        except Exception:
            self.logger.exception("Error parsing HTML file %s", html_path)
            return report

        report.current_week_status = self._safe_section(soup, CURRENT_WEEK_KEYWORDS, "current week status")
        report.next_week_goals = self._safe_section(soup, NEXT_WEEK_KEYWORDS, "next week goals")
        report.risks = self.extract_risk_table(soup, RISK_KEYWORDS)
        self.logger.info("Successfully extracted content from HTML")
        return report

    # ------------------------------------------------------------------
    def _safe_section(self, soup: BeautifulSoup, keywords: Sequence[str], label: str) -> str:
        try:
            content = self.extract_section(soup, keywords)
        except Exception:
            self.logger.exception("Error extracting %s", label)
            return ""
        if content:
            self.logger.info("Extracted %s", label)
        return content

    # ------------------------------------------------------------------
    def extract_section(self, soup: BeautifulSoup, keywords: Sequence[str]) -> str:
        heading = find_section(HtmlTree(soup), keywords)
        if heading is None:
            self.logger.debug("No heading matched %s", list(keywords))
            return ""

        lines: List[str] = []
        for node in iter_section_body(heading):
            if node.kind is NodeKind.LIST:
                for item in node.element.find_all("li"):
                    text = _list_item_text(item)
                    if text:
                        lines.append(f"{BULLET_MARKER} {text}")
            elif node.kind in (NodeKind.PARAGRAPH, NodeKind.TEXT):
                text = node.get_text().strip()
                if text:
                    lines.append(text)
        return format_extracted_content("\n".join(lines))

    # ------------------------------------------------------------------
    def find_risk_table(self, heading: HtmlNode) -> Optional[Tag]:
        element = heading.element
        table = element.find_next_sibling("table")
        if table is None:
            table = element.find_next("table")
        return table

    # ------------------------------------------------------------------
    def extract_risk_table(self, soup: BeautifulSoup, keywords: Sequence[str]) -> List[RiskRecord]:
        """Risk rows below the matching heading, in source order.

        The first row is the header. Rows with fewer than four ``td`` cells or
        a blank description are skipped. A parse error keeps what was read.
        """
        risks: List[RiskRecord] = []
        try:
            heading = find_section(HtmlTree(soup), keywords)
            if heading is None:
                return risks
            table = self.find_risk_table(heading)
            if table is None:
                self.logger.info("No risk table follows heading %r", heading.get_text().strip())
                return risks

            identified = self._clock()
            for row in table.find_all("tr")[1:]:
                cells = row.find_all("td")
                if len(cells) < MIN_RISK_CELLS:
                    continue
                risk = RiskRecord.from_row(
                    [_inline_text(cell.get_text()) for cell in cells[:MIN_RISK_CELLS]],
                    identified=identified,
                )
                if risk.description:
                    risks.append(risk)
            self.logger.info("Extracted %d risks", len(risks))
        except Exception:
            self.logger.exception("Error extracting risks")
        return risks
