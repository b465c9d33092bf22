"""Writes extracted report content and charts back into the output document.

Sections are found by heading keywords, exactly as they are in the HTML.
A section with no matching heading is skipped with a warning; the rest of
the merge carries on.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from docx.document import Document as DocxDocument

from .chart_renderer import chart_size, render_chart
from .constants import (
    CHART_BORDER_WEIGHT_PT,
    CHART_PLACEHOLDER_SCAN_LIMIT,
    CHART_TITLES,
    CURRENT_WEEK_KEYWORDS,
    NEXT_WEEK_KEYWORDS,
    RISK_KEYWORDS,
    VISUALS_FALLBACK_HEADING,
    StatusMessages,
)
from .docx_builder import DocumentCursor, set_picture_border
from .models import ChartDescriptor, StatusReport
from .risk_table import RiskTableBuilder
from .structure import DocxNode, DocxTree, docx_section_body, find_section

LOGGER = logging.getLogger(__name__)


def is_visuals_heading(text: str) -> bool:
    lowered = (text or "").lower()
    if "visual" not in lowered:
        return False
    return "top 25" in lowered or "initiative" in lowered or "analysis" in lowered


def find_visuals_section(document: DocxDocument) -> Optional[DocxNode]:
    for heading in DocxTree(document).iter_headings():
        if is_visuals_heading(heading.get_text()):
            return heading
    return None


def remove_chart_placeholders(
    heading: DocxNode,
    titles: Sequence[str] = CHART_TITLES,
    limit: int = CHART_PLACEHOLDER_SCAN_LIMIT,
) -> int:
    """Drop nodes right after ``heading`` whose text is exactly a chart title."""
    wanted = {title.strip().lower() for title in titles}
    stale: List[DocxNode] = []
    node = heading.next_sibling
    scanned = 0
    while node is not None and scanned < limit:
        if node.get_text().strip().lower() in wanted:
            stale.append(node)
        node = node.next_sibling
        scanned += 1
    for node in stale:
        node.remove()
    return len(stale)


class DocumentMerger:
    """Injects a :class:`StatusReport` and chart descriptors into a document."""

    def __init__(self, logger: Optional[logging.Logger] = None, replace_existing: bool = True):
        self.logger = logger or LOGGER
        self.replace_existing = replace_existing
        self.risk_tables = RiskTableBuilder(self.logger)

    # ------------------------------------------------------------------
    def merge(self, document: DocxDocument, report: StatusReport) -> List[str]:
        """Merge every non-empty section; returns the names of merged sections."""
        merged: List[str] = []
        cursor = DocumentCursor(document)
        tree = DocxTree(document)

        text_sections = (
            ("current week", CURRENT_WEEK_KEYWORDS, report.current_week_status, StatusMessages.CURRENT_WEEK_UPDATED),
            ("next week", NEXT_WEEK_KEYWORDS, report.next_week_goals, StatusMessages.NEXT_WEEK_UPDATED),
        )
        for label, keywords, text, updated_message in text_sections:
            if text.strip() and self._merge_text(cursor, tree, keywords, text, label, updated_message):
                merged.append(label)
        if report.risks:
            heading = self._locate(cursor, tree, RISK_KEYWORDS, "risks")
            if heading is not None:
                cursor.writeln("")
                self.risk_tables.build(cursor, report)
                merged.append("risks")
        return merged

    # ------------------------------------------------------------------
    def _locate(self, cursor: DocumentCursor, tree: DocxTree, keywords: Sequence[str], label: str) -> Optional[DocxNode]:
        heading = find_section(tree, keywords)
        if heading is None:
            self.logger.warning("Could not find %s section in document", label)
            return None
        self.position_after_section(cursor, heading)
        return heading

    # ------------------------------------------------------------------
    def position_after_section(self, cursor: DocumentCursor, heading: DocxNode) -> None:
        """Point the cursor where the section's new content belongs.

        In replace mode the existing body is removed first and writing starts
        right after the heading; otherwise it starts after the last body node.
        """
        body = docx_section_body(heading)
        if self.replace_existing:
            for node in body:
                node.remove()
            if body:
                self.logger.debug("Cleared %d stale nodes under %r", len(body), heading.get_text()[:60])
            cursor.move_to(heading)
        elif body:
            cursor.move_to(body[-1])
        else:
            cursor.move_to(heading)

    # ------------------------------------------------------------------
    def _merge_text(
        self,
        cursor: DocumentCursor,
        tree: DocxTree,
        keywords: Sequence[str],
        text: str,
        label: str,
        updated_message: str,
    ) -> bool:
        heading = self._locate(cursor, tree, keywords, label)
        if heading is None:
            return False
        cursor.writeln("")
        cursor.write_lines(text.strip())
        self.logger.info(updated_message)
        return True

    # ------------------------------------------------------------------
    def insert_charts(self, document: DocxDocument, charts: Sequence[ChartDescriptor]) -> int:
        """Insert rendered charts under the visuals heading; returns how many were written."""
        if not charts:
            return 0
        cursor = DocumentCursor(document)
        heading = find_visuals_section(document)
        if heading is not None:
            removed = remove_chart_placeholders(heading)
            if removed:
                self.logger.info("Removed %d chart placeholders", removed)
            cursor.move_to(heading)
        else:
            self.logger.info("No visuals section found, appending charts at document end")
            cursor.move_to_document_end()
            cursor.insert_page_break()
            cursor.write_heading(VISUALS_FALLBACK_HEADING, level=2)

        inserted = 0
        for chart in charts:
            try:
                self.insert_chart(cursor, chart)
                inserted += 1
            except Exception:
                self.logger.exception("Error inserting chart %s", chart.title)
        self.logger.info("Inserted %d of %d charts", inserted, len(charts))
        return inserted

    # ------------------------------------------------------------------
    def insert_chart(self, cursor: DocumentCursor, chart: ChartDescriptor) -> None:
        image = render_chart(chart)
        width, height = chart_size(chart.kind)
        cursor.writeln(chart.title, bold=True, keep_with_next=True)
        shape = cursor.insert_picture(image, width, height)
        set_picture_border(shape, CHART_BORDER_WEIGHT_PT)
        cursor.writeln("")
