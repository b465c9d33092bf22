"""Layout fixes applied to the merged document before it is saved."""
from __future__ import annotations

import logging
from typing import Optional

from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Length, Pt
from docx.text.paragraph import Paragraph

from .constants import (
    DEFAULT_FONT,
    FOOTER_FONT_SIZE,
    HEADER_FONT_SIZE,
    HEADING_MIN_SPACE_AFTER_PT,
    HEADING_MIN_SPACE_BEFORE_PT,
    REPORT_HEADER_TEXT,
)
from .docx_builder import append_field, has_page_break, set_repeat_table_header
from .headings import is_heading, is_major_heading
from .structure import DocxTree

LOGGER = logging.getLogger(__name__)


def effective_spacing(paragraph: Paragraph, attribute: str) -> Optional[Length]:
    """Direct ``space_before``/``space_after``, else the nearest style value."""
    value = getattr(paragraph.paragraph_format, attribute)
    style = paragraph.style
    while value is None and style is not None:
        value = getattr(style.paragraph_format, attribute)
        style = style.base_style
    return value


def should_add_page_break_before(
    paragraph: Paragraph,
    previous: Optional[Paragraph],
    is_first: bool,
) -> bool:
    """Page-break policy for major headings.

    Never fires for the first block, a heading that already starts a page,
    or one that follows a blank paragraph. A heading right after a table has
    no previous paragraph and is left alone too.
    """
    if is_first or previous is None:
        return False
    if not is_major_heading(paragraph):
        return False
    if has_page_break(paragraph) or has_page_break(previous):
        return False
    if not previous.text.strip():
        return False
    return True


def fix_heading_layout(
    document: DocxDocument,
    major_page_breaks: bool = False,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Keep headings with the following block and enforce minimum spacing.

    Returns the number of paragraphs treated as headings.
    """
    log = logger or LOGGER
    fixed = 0
    previous: Optional[Paragraph] = None
    for index, node in enumerate(DocxTree(document).iter_nodes()):
        paragraph = node.paragraph
        if paragraph is None:
            previous = None
            continue
        if is_heading(paragraph):
            fmt = paragraph.paragraph_format
            fmt.keep_with_next = True
            space_after = effective_spacing(paragraph, "space_after")
            if space_after is None or space_after < Pt(HEADING_MIN_SPACE_AFTER_PT):
                fmt.space_after = Pt(HEADING_MIN_SPACE_AFTER_PT)
            space_before = effective_spacing(paragraph, "space_before")
            if space_before is None or space_before < Pt(HEADING_MIN_SPACE_BEFORE_PT):
                fmt.space_before = Pt(HEADING_MIN_SPACE_BEFORE_PT)
            if major_page_breaks and should_add_page_break_before(paragraph, previous, index == 0):
                fmt.page_break_before = True
                log.debug("Page break before major heading %r", paragraph.text[:60])
            fixed += 1
        previous = paragraph
    log.info("Applied keep-with-next to %d headings", fixed)
    return fixed


def ensure_table_header_repetition(document: DocxDocument, logger: Optional[logging.Logger] = None) -> int:
    """Mark the first row of every table as a repeating header row."""
    count = 0
    for table in DocxTree(document).tables():
        if not table.rows:
            continue
        set_repeat_table_header(table.rows[0])
        count += 1
    (logger or LOGGER).info("Set repeating header rows on %d tables", count)
    return count


def configure_headers_and_footers(document: DocxDocument, header_text: str = REPORT_HEADER_TEXT) -> None:
    for section in document.sections:
        header = section.header
        header.is_linked_to_previous = False
        header_para = header.paragraphs[0] if header.paragraphs else header.add_paragraph()
        header_para.clear()
        header_run = header_para.add_run(header_text)
        header_run.font.name = DEFAULT_FONT
        header_run.font.size = Pt(HEADER_FONT_SIZE)
        header_para.alignment = WD_ALIGN_PARAGRAPH.LEFT

        footer = section.footer
        footer.is_linked_to_previous = False
        footer_para = footer.paragraphs[0] if footer.paragraphs else footer.add_paragraph()
        footer_para.clear()
        footer_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        for text, field in (("Page ", "PAGE"), (" of ", "NUMPAGES")):
            run = footer_para.add_run(text)
            run.font.name = DEFAULT_FONT
            run.font.size = Pt(FOOTER_FONT_SIZE)
            append_field(footer_para, field)
