"""python-docx plumbing: HTML loading, a write cursor and low-level XML helpers.

python-docx only appends at the end of a document. :class:`DocumentCursor`
adds "insert after this node" on top of that: each new block is created
with the regular python-docx API and then moved next to the current anchor.
"""
from __future__ import annotations

import base64
import binascii
import html
import io
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag
from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement, parse_xml
from docx.oxml.ns import qn
from docx.shared import Inches, Pt
from docx.table import Table, _Row
from docx.text.paragraph import Paragraph

from .conversion_warnings import WarningKind
from .html_preprocessor import parse_html

LOGGER = logging.getLogger(__name__)

WarningSink = Callable[[WarningKind, str], None]

WHITESPACE_RE = re.compile(r"\s+")
PAGE_BREAK_STYLE_RE = re.compile(
    r"(?:page-break-before|break-before)\s*:\s*(?:always|page)", re.IGNORECASE
)
TEXT_ALIGN_RE = re.compile(r"text-align\s*:\s*(left|center|right|justify)", re.IGNORECASE)
BOLD_STYLE_RE = re.compile(r"font-weight\s*:\s*(bold|[6-9]00)", re.IGNORECASE)
ITALIC_STYLE_RE = re.compile(r"font-style\s*:\s*italic", re.IGNORECASE)

_ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}

HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
PARAGRAPH_TAGS = {"p", "blockquote", "pre", "address", "dt", "dd", "caption", "figcaption", "summary"}
CONTAINER_TAGS = {
    "html", "body", "div", "section", "article", "main", "header", "footer", "nav",
    "aside", "figure", "center", "form", "details", "dl", "fieldset", "picture",
}
INLINE_TAGS = {
    "span", "a", "b", "strong", "i", "em", "u", "ins", "font", "small", "big", "sup",
    "sub", "code", "label", "abbr", "mark", "cite", "q", "s", "strike", "del", "kbd",
    "samp", "var", "time", "tt", "br", "img",
}
BOLD_TAGS = {"b", "strong"}
ITALIC_TAGS = {"i", "em", "cite"}
UNDERLINE_TAGS = {"u", "ins"}
SKIPPED_TAGS = {
    "head", "script", "style", "meta", "link", "title", "noscript", "template",
    "svg", "button", "input", "select", "textarea", "iframe", "object", "embed",
}
BLOCK_TAGS = HEADING_TAGS | PARAGRAPH_TAGS | CONTAINER_TAGS | {"ul", "ol", "table", "hr", "canvas", "li"}

MAX_IMAGE_WIDTH = Inches(6.0)


# ----------------------------------------------------------------------
# XML helpers
# ----------------------------------------------------------------------
def _element_of(node):
    element = getattr(node, "_element", None)
    if element is None:
        element = getattr(node, "element", None)
    return element if element is not None else node


def set_repeat_table_header(row: _Row) -> None:
    tr_pr = row._tr.get_or_add_trPr()
    header = tr_pr.find(qn("w:tblHeader"))
    if header is None:
        header = OxmlElement("w:tblHeader")
        tr_pr.append(header)
    header.set(qn("w:val"), "true")


def is_repeat_table_header(row: _Row) -> bool:
    tr_pr = row._tr.trPr
    if tr_pr is None:
        return False
    header = tr_pr.find(qn("w:tblHeader"))
    if header is None:
        return False
    return header.get(qn("w:val"), "true").lower() not in ("false", "0", "off")


def append_field(paragraph: Paragraph, instruction: str, placeholder: str = "1") -> None:
    """Append a simple field (``PAGE``, ``NUMPAGES``, ...) to a paragraph."""
    field = OxmlElement("w:fldSimple")
    field.set(qn("w:instr"), instruction)
    run = OxmlElement("w:r")
    text = OxmlElement("w:t")
    text.text = placeholder
    run.append(text)
    field.append(run)
    paragraph._p.append(field)


def add_horizontal_rule(paragraph: Paragraph) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    borders = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "6")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), "auto")
    borders.append(bottom)
    p_pr.append(borders)


def set_picture_border(inline_shape, weight_pt: float, color: str = "000000") -> None:
    """Outline an inline picture with a solid line."""
    sp_pr_list = inline_shape._inline.xpath(".//pic:spPr")
    if not sp_pr_list:
        return
    sp_pr = sp_pr_list[0]
    for existing in sp_pr.findall(qn("a:ln")):
        sp_pr.remove(existing)
    line = OxmlElement("a:ln")
    line.set("w", str(int(Pt(weight_pt))))
    fill = OxmlElement("a:solidFill")
    rgb = OxmlElement("a:srgbClr")
    rgb.set("val", color)
    fill.append(rgb)
    line.append(fill)
    sp_pr.append(line)


def has_page_break(paragraph: Paragraph) -> bool:
    """True when the paragraph starts a page or contains a hard page break."""
    if paragraph.paragraph_format.page_break_before:
        return True
    for br in paragraph._p.iter(qn("w:br")):
        if br.get(qn("w:type")) == "page":
            return True
    return False


def apply_watermark(document: DocxDocument, text: str) -> None:
    safe_text = (text or "").strip()
    if not safe_text:
        return
    safe_text = html.escape(safe_text).replace('"', "'")
    vml_shape = "{urn:schemas-microsoft-com:vml}shape"
    watermark_xml = (
        '<w:p xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main" '
        'xmlns:v="urn:schemas-microsoft-com:vml" xmlns:o="urn:schemas-microsoft-com:office:office" '
        'xmlns:w10="urn:schemas-microsoft-com:office:word">'
        '<w:r><w:pict>'
        '<v:shapetype id="_x0000_t136" coordsize="21600,21600" o:spt="136" o:connecttype="custom" '
        'path="m@7,l@8,m@5,21600l@6,21600e" filled="f" stroked="f">'
        '<v:path o:extrusionok="f" gradientshapeok="t" o:connecttype="custom"/>'
        '<o:lock v:ext="edit" text="t" shapetype="t"/>'
        '</v:shapetype>'
        '<v:shape id="StatusReportWatermark" o:spid="_x0000_s1025" type="#_x0000_t136" '
        'style="position:absolute;margin-left:0;margin-top:0;width:468pt;height:117pt;rotation:315;'
        'z-index:-251658240;mso-position-horizontal:center;mso-position-vertical:center" '
        'o:allowincell="f" fillcolor="silver" stroked="f">'
        '<v:fill opacity="0.25"/>'
        f"<v:textpath style=\"font-family:'Calibri';font-size:1pt\" string=\"{safe_text}\"/>"
        '</v:shape>'
        '</w:pict></w:r></w:p>'
    )
    for section in document.sections:
        header = section.header
        header.is_linked_to_previous = False
        for shape in [s for s in header._element.iter(vml_shape) if s.get("id") == "StatusReportWatermark"]:
            paragraph = shape.getparent()
            while paragraph is not None and paragraph.tag != qn("w:p"):
                paragraph = paragraph.getparent()
            if paragraph is not None and paragraph.getparent() is not None:
                paragraph.getparent().remove(paragraph)
        header._element.append(parse_xml(watermark_xml))


# ----------------------------------------------------------------------
# Cursor
# ----------------------------------------------------------------------
class DocumentCursor:
    """Builder-style writer that inserts blocks after a movable anchor."""

    def __init__(self, document: DocxDocument):
        self.document = document
        self._anchor = None

    @property
    def at_document_end(self) -> bool:
        return self._anchor is None

    # ------------------------------------------------------------------
    def move_to(self, node) -> None:
        """Subsequent writes go directly after ``node``."""
        self._anchor = _element_of(node)

    # ------------------------------------------------------------------
    def move_to_document_end(self) -> None:
        self._anchor = None

    # ------------------------------------------------------------------
    def _place(self, element) -> None:
        if self._anchor is not None:
            self._anchor.addnext(element)
            self._anchor = element

    # ------------------------------------------------------------------
    def _new_paragraph(self, style: Optional[str] = None) -> Paragraph:
        paragraph = self.document.add_paragraph()
        if style:
            try:
                paragraph.style = self.document.styles[style]
            except KeyError:
                LOGGER.debug("Style %s missing from document, using default", style)
        return paragraph

    # ------------------------------------------------------------------
    def writeln(
        self,
        text: str = "",
        style: Optional[str] = None,
        bold: Optional[bool] = None,
        keep_with_next: Optional[bool] = None,
    ) -> Paragraph:
        paragraph = self._new_paragraph(style)
        if text:
            run = paragraph.add_run(text)
            if bold is not None:
                run.bold = bold
        if keep_with_next is not None:
            paragraph.paragraph_format.keep_with_next = keep_with_next
        self._place(paragraph._p)
        return paragraph

    # ------------------------------------------------------------------
    def write_lines(self, text: str, style: Optional[str] = "Normal") -> List[Paragraph]:
        return [self.writeln(line, style=style) for line in (text or "").split("\n")]

    # ------------------------------------------------------------------
    def write_heading(self, text: str, level: int = 2) -> Paragraph:
        paragraph = self.document.add_heading(text, level=level)
        self._place(paragraph._p)
        return paragraph

    # ------------------------------------------------------------------
    def insert_page_break(self) -> Paragraph:
        paragraph = self.document.add_paragraph()
        paragraph.add_run().add_break(WD_BREAK.PAGE)
        self._place(paragraph._p)
        return paragraph

    # ------------------------------------------------------------------
    def insert_table(
        self,
        rows: Sequence[Sequence[str]],
        widths: Optional[Sequence[float]] = None,
        header_bold: bool = True,
        style: str = "Table Grid",
    ) -> Table:
        """Insert a table of plain-text cells; ``widths`` are in points."""
        col_count = max((len(row) for row in rows), default=0) or 1
        table = self.document.add_table(rows=len(rows), cols=col_count)
        try:
            table.style = self.document.styles[style]
        except KeyError:
            LOGGER.debug("Table style %s missing from document", style)
        if widths:
            table.autofit = False
        for row_idx, values in enumerate(rows):
            row = table.rows[row_idx]
            for col_idx, value in enumerate(values):
                cell = row.cells[col_idx]
                cell.text = str(value if value is not None else "")
                if widths and col_idx < len(widths):
                    cell.width = Pt(widths[col_idx])
                if header_bold and row_idx == 0:
                    for run in cell.paragraphs[0].runs:
                        run.bold = True
        self._place(table._tbl)
        return table

    # ------------------------------------------------------------------
    def insert_picture(
        self,
        stream: Union[str, io.BytesIO],
        width_pt: Optional[float] = None,
        height_pt: Optional[float] = None,
        alignment=WD_ALIGN_PARAGRAPH.CENTER,
    ):
        paragraph = self.document.add_paragraph()
        paragraph.alignment = alignment
        run = paragraph.add_run()
        shape = run.add_picture(
            stream,
            width=Pt(width_pt) if width_pt else None,
            height=Pt(height_pt) if height_pt else None,
        )
        self._place(paragraph._p)
        return shape


# ----------------------------------------------------------------------
# HTML loader
# ----------------------------------------------------------------------
def _collapse(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text)


def _style_of(tag: Tag) -> str:
    return str(tag.get("style", "") or "")


class HtmlDocumentLoader:
    """Renders an HTML body into a python-docx document.

    Headings, paragraphs, lists, tables, images and horizontal rules are
    carried over; anything else is reduced to its text and reported through
    the warning callback.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, template_path: Optional[str] = None):
        self.logger = logger or LOGGER
        self.template_path = template_path
        self._base_uri: Optional[Path] = None
        self._warn: WarningSink = lambda kind, description: None

    # ------------------------------------------------------------------
    def load(
        self,
        html_path: str,
        base_uri: Optional[str] = None,
        warning_callback: Optional[WarningSink] = None,
    ) -> DocxDocument:
        markup = Path(html_path).read_text(encoding="utf-8", errors="replace")
        if base_uri is None:
            base_uri = str(Path(html_path).resolve().parent)
        return self.load_soup(parse_html(markup), base_uri, warning_callback)

    # ------------------------------------------------------------------
    def load_soup(
        self,
        soup: BeautifulSoup,
        base_uri: Optional[str] = None,
        warning_callback: Optional[WarningSink] = None,
    ) -> DocxDocument:
        self._base_uri = Path(base_uri) if base_uri else None
        self._warn = warning_callback or (lambda kind, description: None)
        document = Document(self.template_path) if self.template_path else Document()
        root = soup.body or soup
        self._render_children(document, root)
        self.logger.info("Loaded HTML into document with %d body blocks", len(document.element.body) - 1)
        return document

    # ------------------------------------------------------------------
    def _render_children(self, document: DocxDocument, parent: Tag) -> None:
        pending: Optional[Paragraph] = None
        for child in parent.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                text = _collapse(str(child))
                if not text.strip():
                    continue
                if pending is None:
                    pending = document.add_paragraph()
                    text = text.lstrip()
                pending.add_run(text)
                continue
            if not isinstance(child, Tag):
                continue
            if child.name in INLINE_TAGS:
                if pending is None:
                    pending = document.add_paragraph()
                self._render_inline(pending, child)
                continue
            pending = None
            self._render_block(document, child)

    # ------------------------------------------------------------------
    def _render_block(self, document: DocxDocument, tag: Tag) -> None:
        name = tag.name
        if name in SKIPPED_TAGS:
            return
        body = document.element.body
        start = len(body.findall(qn("w:p")))

        if name in HEADING_TAGS:
            level = int(name[1])
            document.add_heading(_collapse(tag.get_text()).strip(), level=level)
        elif name in PARAGRAPH_TAGS:
            if any(isinstance(c, Tag) and c.name in BLOCK_TAGS for c in tag.children):
                self._render_children(document, tag)
            else:
                paragraph = document.add_paragraph()
                self._render_inline(paragraph, tag)
        elif name in ("ul", "ol"):
            self._render_list(document, tag, 1)
        elif name == "li":
            self._render_list_item(document, tag, "List Bullet", 1)
        elif name == "table":
            self._render_table(document, tag)
        elif name == "hr":
            add_horizontal_rule(document.add_paragraph())
        elif name == "canvas":
            self._warn(
                WarningKind.MINOR_FORMATTING_LOSS,
                f"Canvas '{tag.get('id', '')}' has no static content and was not rendered",
            )
        elif name in CONTAINER_TAGS:
            self._render_children(document, tag)
        else:
            self._warn(WarningKind.UNEXPECTED_CONTENT, f"Unsupported element <{name}> rendered as text")
            self._render_children(document, tag)

        self._apply_block_style(document, tag, start)

    # ------------------------------------------------------------------
    def _apply_block_style(self, document: DocxDocument, tag: Tag, start: int) -> None:
        style = _style_of(tag)
        if not style and not tag.get("align"):
            return
        new_paragraphs = [
            Paragraph(el, document) for el in document.element.body.findall(qn("w:p"))[start:]
        ]
        if not new_paragraphs:
            return
        if PAGE_BREAK_STYLE_RE.search(style):
            new_paragraphs[0].paragraph_format.page_break_before = True
        align_match = TEXT_ALIGN_RE.search(style)
        align = align_match.group(1).lower() if align_match else str(tag.get("align", "")).lower()
        if align in _ALIGNMENTS and tag.name not in CONTAINER_TAGS:
            for paragraph in new_paragraphs:
                paragraph.alignment = _ALIGNMENTS[align]

    # ------------------------------------------------------------------
    def _add_styled_paragraph(self, document: DocxDocument, style: str, fallback_prefix: str = "") -> Paragraph:
        paragraph = document.add_paragraph()
        try:
            paragraph.style = document.styles[style]
        except KeyError:
            self._warn(WarningKind.MINOR_FORMATTING_LOSS, f"Paragraph style '{style}' is not available")
            if fallback_prefix:
                paragraph.add_run(fallback_prefix)
        return paragraph

    # ------------------------------------------------------------------
    def _render_list(self, document: DocxDocument, tag: Tag, depth: int) -> None:
        base = "List Number" if tag.name == "ol" else "List Bullet"
        style = base if depth == 1 else f"{base} {min(depth, 3)}"
        for item in tag.find_all("li", recursive=False):
            self._render_list_item(document, item, style, depth)

    # ------------------------------------------------------------------
    def _render_list_item(self, document: DocxDocument, item: Tag, style: str, depth: int) -> None:
        paragraph = self._add_styled_paragraph(document, style, fallback_prefix="• ")
        nested = []
        for child in item.children:
            if isinstance(child, Tag) and child.name in ("ul", "ol"):
                nested.append(child)
            elif isinstance(child, Tag) and child.name == "table":
                self._warn(WarningKind.MAJOR_FORMATTING_LOSS, "Table inside list item flattened to text")
                paragraph.add_run(_collapse(child.get_text(" ")).strip())
            elif isinstance(child, Tag):
                self._render_inline(paragraph, child)
            elif not isinstance(child, PreformattedString):
                text = _collapse(str(child))
                if not paragraph.runs:
                    text = text.lstrip()
                if text:
                    paragraph.add_run(text)
        for sub_list in nested:
            self._render_list(document, sub_list, depth + 1)

    # ------------------------------------------------------------------
    def _render_table(self, document: DocxDocument, tag: Tag) -> None:
        rows = [tr for tr in tag.find_all("tr") if tr.find_parent("table") is tag]
        if not rows:
            return
        grid: List[List[tuple[Tag, int]]] = []
        for tr in rows:
            cells = []
            for cell in tr.find_all(["td", "th"], recursive=False):
                try:
                    span = max(1, int(cell.get("colspan", 1)))
                except (TypeError, ValueError):
                    span = 1
                cells.append((cell, span))
            grid.append(cells)
        col_count = max((sum(span for _, span in cells) for cells in grid), default=0)
        if col_count == 0:
            return

        table = document.add_table(rows=len(grid), cols=col_count)
        try:
            table.style = document.styles["Table Grid"]
        except KeyError:
            self._warn(WarningKind.MINOR_FORMATTING_LOSS, "Table style 'Table Grid' is not available")

        for row_idx, cells in enumerate(grid):
            col_idx = 0
            for cell_tag, span in cells:
                if col_idx >= col_count:
                    break
                target = table.cell(row_idx, col_idx)
                end = min(col_idx + span, col_count) - 1
                if end > col_idx:
                    target = target.merge(table.cell(row_idx, end))
                if cell_tag.find("table") is not None:
                    self._warn(WarningKind.MAJOR_FORMATTING_LOSS, "Nested table flattened to text")
                lines = [line.strip() for line in cell_tag.get_text(separator="\n").splitlines()]
                target.text = "\n".join(_collapse(line) for line in lines if line)
                if cell_tag.name == "th":
                    for paragraph in target.paragraphs:
                        for run in paragraph.runs:
                            run.bold = True
                col_idx = end + 1

    # ------------------------------------------------------------------
    def _render_inline(
        self,
        paragraph: Paragraph,
        node: Tag,
        bold: bool = False,
        italic: bool = False,
        underline: bool = False,
    ) -> None:
        style = _style_of(node)
        bold = bold or node.name in BOLD_TAGS or bool(BOLD_STYLE_RE.search(style))
        italic = italic or node.name in ITALIC_TAGS or bool(ITALIC_STYLE_RE.search(style))
        underline = underline or node.name in UNDERLINE_TAGS
        if node.name == "br":
            paragraph.add_run().add_break()
            return
        if node.name == "img":
            self._render_image(paragraph, node)
            return
        for child in node.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                text = _collapse(str(child))
                if not paragraph.runs:
                    text = text.lstrip()
                if not text:
                    continue
                run = paragraph.add_run(text)
                run.bold = bold or None
                run.italic = italic or None
                run.underline = underline or None
            elif isinstance(child, Tag):
                if child.name in SKIPPED_TAGS:
                    continue
                self._render_inline(paragraph, child, bold, italic, underline)

    # ------------------------------------------------------------------
    def _resolve_image(self, src: str) -> Optional[Union[str, io.BytesIO]]:
        src = (src or "").strip()
        if not src:
            return None
        if src.startswith("data:"):
            header, _, payload = src.partition(",")
            if ";base64" not in header:
                return None
            try:
                return io.BytesIO(base64.b64decode(payload))
            except (binascii.Error, ValueError):
                return None
        parsed = urlparse(src)
        if parsed.scheme in ("http", "https"):
            return None
        path = Path(unquote(parsed.path if parsed.scheme == "file" else src))
        if not path.is_absolute() and self._base_uri is not None:
            path = self._base_uri / path
        return str(path) if path.is_file() else None

    # ------------------------------------------------------------------
    def _render_image(self, paragraph: Paragraph, tag: Tag) -> None:
        src = str(tag.get("src", ""))
        source = self._resolve_image(src)
        if source is None:
            self._warn(WarningKind.MAJOR_FORMATTING_LOSS, f"Image '{src[:80]}' could not be resolved")
            return
        try:
            shape = paragraph.add_run().add_picture(source)
        except Exception as exc:
            self._warn(WarningKind.MAJOR_FORMATTING_LOSS, f"Image '{src[:80]}' could not be embedded: {exc}")
            return
        if shape.width and shape.width > MAX_IMAGE_WIDTH:
            ratio = MAX_IMAGE_WIDTH / shape.width
            shape.height = int(shape.height * ratio)
            shape.width = MAX_IMAGE_WIDTH


__all__ = [
    "DocumentCursor",
    "HtmlDocumentLoader",
    "add_horizontal_rule",
    "append_field",
    "apply_watermark",
    "has_page_break",
    "is_repeat_table_header",
    "set_picture_border",
    "set_repeat_table_header",
]
