"""Minimal structural node contract shared by the HTML source and Word target.

Section lookup only needs a node's kind, its text and sibling/parent links.
Two adapters provide that: :class:`HtmlNode` over BeautifulSoup elements and
:class:`DocxNode` over python-docx body elements. The locator functions here
work against either without knowing which tree they walk.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional, Protocol, Sequence

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag
from docx.document import Document as DocxDocument
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from .headings import heading_level, is_heading


class NodeKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "list-item"
    TABLE = "table"
    TABLE_ROW = "table-row"
    TABLE_CELL = "table-cell"
    TEXT = "text"
    OTHER = "other"


class StructuralNode(Protocol):
    @property
    def kind(self) -> NodeKind: ...

    @property
    def next_sibling(self) -> Optional["StructuralNode"]: ...

    @property
    def previous_sibling(self) -> Optional["StructuralNode"]: ...

    @property
    def parent(self) -> Optional["StructuralNode"]: ...

    def get_text(self) -> str: ...


class StructuralTree(Protocol):
    def iter_headings(self) -> Iterator[StructuralNode]: ...


# ----------------------------------------------------------------------
# Locator
# ----------------------------------------------------------------------
def heading_matches(text: str, keywords: Sequence[str]) -> bool:
    lowered = (text or "").lower()
    return any(keyword and keyword.lower() in lowered for keyword in keywords)


def find_section(tree: StructuralTree, keywords: Sequence[str]) -> Optional[StructuralNode]:
    """First heading, in document order, whose text contains any keyword.

    ``None`` means the section is absent; callers skip it.
    """
    if not keywords:
        return None
    for heading in tree.iter_headings():
        if heading_matches(heading.get_text(), keywords):
            return heading
    return None


def iter_section_body(heading: StructuralNode) -> Iterator[StructuralNode]:
    """Siblings after ``heading`` up to, not including, the next heading."""
    node = heading.next_sibling
    while node is not None and node.kind is not NodeKind.HEADING:
        yield node
        node = node.next_sibling


def docx_section_body(heading: "DocxNode") -> List["DocxNode"]:
    """Body of a Word section, as replaced by the merge.

    Under a heading-styled paragraph the body runs to the next heading-styled
    paragraph, so bold or large body lines stay inside the section. A heading
    found only by its formatting falls back to :func:`iter_section_body`.
    """
    if not heading.is_styled_heading:
        return list(iter_section_body(heading))
    body: List[DocxNode] = []
    node = heading.next_sibling
    while node is not None and not node.is_styled_heading:
        body.append(node)
        node = node.next_sibling
    return body


# ----------------------------------------------------------------------
# HTML adapter
# ----------------------------------------------------------------------
HTML_HEADING_TAGS = ("h1", "h2", "h3", "h4")

_HTML_KINDS = {
    "p": NodeKind.PARAGRAPH,
    "ul": NodeKind.LIST,
    "ol": NodeKind.LIST,
    "li": NodeKind.LIST_ITEM,
    "table": NodeKind.TABLE,
    "tr": NodeKind.TABLE_ROW,
    "td": NodeKind.TABLE_CELL,
    "th": NodeKind.TABLE_CELL,
}


class HtmlNode:
    """Read-only view of a BeautifulSoup element."""

    __slots__ = ("element",)

    def __init__(self, element: PageElement):
        self.element = element

    @staticmethod
    def wrap(element: Optional[PageElement]) -> Optional["HtmlNode"]:
        if element is None or isinstance(element, BeautifulSoup):
            return None
        return HtmlNode(element)

    @property
    def kind(self) -> NodeKind:
        element = self.element
        if isinstance(element, Tag):
            if element.name in HTML_HEADING_TAGS:
                return NodeKind.HEADING
            return _HTML_KINDS.get(element.name, NodeKind.OTHER)
        if isinstance(element, PreformattedString):
            return NodeKind.OTHER
        if isinstance(element, NavigableString):
            return NodeKind.TEXT
        return NodeKind.OTHER

    @property
    def name(self) -> str:
        return self.element.name if isinstance(self.element, Tag) else ""

    @property
    def next_sibling(self) -> Optional["HtmlNode"]:
        return self.wrap(self.element.next_sibling)

    @property
    def previous_sibling(self) -> Optional["HtmlNode"]:
        return self.wrap(self.element.previous_sibling)

    @property
    def parent(self) -> Optional["HtmlNode"]:
        return self.wrap(self.element.parent)

    def get_text(self) -> str:
        if isinstance(self.element, Tag):
            return self.element.get_text()
        return str(self.element)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HtmlNode) and other.element is self.element

    def __hash__(self) -> int:
        return id(self.element)

    def __repr__(self) -> str:
        return f"HtmlNode({self.kind.value}, {self.get_text()[:40]!r})"


class HtmlTree:
    def __init__(self, soup: BeautifulSoup):
        self.soup = soup

    def iter_headings(self) -> Iterator[HtmlNode]:
        for tag in self.soup.find_all(list(HTML_HEADING_TAGS)):
            yield HtmlNode(tag)


# ----------------------------------------------------------------------
# Word adapter
# ----------------------------------------------------------------------
_W_P = qn("w:p")
_W_TBL = qn("w:tbl")
_W_TR = qn("w:tr")
_W_TC = qn("w:tc")
_W_BODY = qn("w:body")
_W_SECT_PR = qn("w:sectPr")
_W_T = qn("w:t")


class DocxNode:
    """View of a python-docx body element (paragraph, table, row or cell)."""

    __slots__ = ("element", "document")

    def __init__(self, element, document: DocxDocument):
        self.element = element
        self.document = document

    def _wrap(self, element) -> Optional["DocxNode"]:
        if element is None or element.tag in (_W_BODY, _W_SECT_PR):
            return None
        return DocxNode(element, self.document)

    @property
    def paragraph(self) -> Optional[Paragraph]:
        if self.element.tag == _W_P:
            return Paragraph(self.element, self.document)
        return None

    @property
    def is_styled_heading(self) -> bool:
        """True for paragraphs carrying a ``Heading N`` style."""
        paragraph = self.paragraph
        return paragraph is not None and heading_level(paragraph) is not None

    @property
    def table(self) -> Optional[Table]:
        if self.element.tag == _W_TBL:
            return Table(self.element, self.document)
        return None

    @property
    def kind(self) -> NodeKind:
        tag = self.element.tag
        if tag == _W_P:
            paragraph = self.paragraph
            style_name = (paragraph.style.name or "") if paragraph.style is not None else ""
            if style_name.lower().startswith("list"):
                return NodeKind.LIST_ITEM
            if is_heading(paragraph):
                return NodeKind.HEADING
            return NodeKind.PARAGRAPH
        if tag == _W_TBL:
            return NodeKind.TABLE
        if tag == _W_TR:
            return NodeKind.TABLE_ROW
        if tag == _W_TC:
            return NodeKind.TABLE_CELL
        return NodeKind.OTHER

    @property
    def next_sibling(self) -> Optional["DocxNode"]:
        return self._wrap(self.element.getnext())

    @property
    def previous_sibling(self) -> Optional["DocxNode"]:
        return self._wrap(self.element.getprevious())

    @property
    def parent(self) -> Optional["DocxNode"]:
        return self._wrap(self.element.getparent())

    def get_text(self) -> str:
        if self.element.tag == _W_P:
            return self.paragraph.text
        return "".join(t.text or "" for t in self.element.iter(_W_T))

    def remove(self) -> None:
        parent = self.element.getparent()
        if parent is not None:
            parent.remove(self.element)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DocxNode) and other.element is self.element

    def __hash__(self) -> int:
        return id(self.element)

    def __repr__(self) -> str:
        return f"DocxNode({self.element.tag.split('}')[-1]}, {self.get_text()[:40]!r})"


class DocxTree:
    def __init__(self, document: DocxDocument):
        self.document = document

    def iter_nodes(self) -> Iterator[DocxNode]:
        for element in self.document.element.body.iterchildren():
            if element.tag == _W_SECT_PR:
                continue
            yield DocxNode(element, self.document)

    def iter_paragraphs(self) -> Iterator[DocxNode]:
        for node in self.iter_nodes():
            if node.element.tag == _W_P:
                yield node

    def iter_headings(self) -> Iterator[DocxNode]:
        for node in self.iter_paragraphs():
            if node.kind is NodeKind.HEADING:
                yield node

    def tables(self) -> List[Table]:
        """Every table in the body, nested ones included, in document order."""
        return [Table(tbl, self.document) for tbl in self.document.element.body.iter(_W_TBL)]
