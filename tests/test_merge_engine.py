"""Tests for injecting report content and charts into the output document."""
from datetime import datetime

import pytest
from docx import Document

from status_report_tool.constants import CURRENT_WEEK_KEYWORDS, VISUALS_FALLBACK_HEADING
from status_report_tool.docx_builder import HtmlDocumentLoader, is_repeat_table_header
from status_report_tool.html_extractor import HtmlContentExtractor
from status_report_tool.html_preprocessor import parse_html
from status_report_tool.merge_engine import (
    DocumentMerger,
    find_visuals_section,
    is_visuals_heading,
    remove_chart_placeholders,
)
from status_report_tool.models import ChartDescriptor, ChartKind, ChartSeries, RiskRecord, StatusReport
from status_report_tool.structure import DocxTree


def _texts(document):
    return [node.get_text() for node in DocxTree(document).iter_nodes()]


@pytest.fixture
def report():
    return StatusReport(
        input_path="in.html",
        output_path="out.docx",
        current_week_status="• Finished the data model\n• Shipped the extractor",
        next_week_goals="Start the merge engine",
        risks=[
            RiskRecord("Vendor slips", "High", "Escalate", "Open", datetime(2024, 3, 4), id="abcd1234"),
            RiskRecord("Staff shortage", "Medium", "Contractor", "", datetime(2024, 3, 5), id="efgh5678"),
        ],
    )


@pytest.fixture
def bar_chart():
    return ChartDescriptor(
        title="Top 25 Value Analysis",
        kind=ChartKind.BAR,
        labels=["A", "B"],
        series=[ChartSeries("Value", [3, 5], ["#4CAF50"])],
    )


class TestMerge:

    def test_empty_report_is_a_no_op(self, template_document):
        before = template_document.element.body.xml
        merged = DocumentMerger().merge(template_document, StatusReport())
        assert merged == []
        assert template_document.element.body.xml == before

    def test_sections_replaced(self, template_document, report):
        merged = DocumentMerger().merge(template_document, report)

        assert merged == ["current week", "next week", "risks"]
        texts = _texts(template_document)
        assert texts[:10] == [
            "Enterprise AI Weekly Status",
            "Current Week Accomplishments",
            "",
            "• Finished the data model",
            "• Shipped the extractor",
            "Next Week Goals",
            "",
            "Start the merge engine",
            "Risks",
            "",
        ]
        assert "Old accomplishment text" not in texts
        assert "Old goal text" not in texts

    def test_sections_appended_when_keeping_existing(self, template_document, report):
        DocumentMerger(replace_existing=False).merge(template_document, report)
        texts = _texts(template_document)
        old = texts.index("Old accomplishment text")
        assert texts[old + 1:old + 4] == ["", "• Finished the data model", "• Shipped the extractor"]

    def test_risk_table(self, template_document, report):
        DocumentMerger().merge(template_document, report)

        assert len(template_document.tables) == 1
        table = template_document.tables[0]
        header = [cell.text for cell in table.rows[0].cells]
        assert header == ["ID", "Description", "Impact", "Mitigation", "Status", "Date Identified"]
        assert [cell.text for cell in table.rows[1].cells] == [
            "abcd1234", "Vendor slips", "High", "Escalate", "Open", "03/04/2024",
        ]
        assert table.rows[2].cells[1].text == "Staff shortage"
        assert table.rows[2].cells[4].text == "Open"
        assert is_repeat_table_header(table.rows[0])
        assert all(run.bold for run in table.rows[0].cells[0].paragraphs[0].runs)

    def test_missing_heading_skipped(self, report):
        document = Document()
        document.add_heading("Risks", level=2)
        merged = DocumentMerger().merge(document, report)
        assert merged == ["risks"]
        assert len(document.tables) == 1

    def test_stale_table_replaced(self, template_document, report):
        template_document.add_table(rows=2, cols=4)
        DocumentMerger().merge(template_document, report)
        assert len(template_document.tables) == 1
        assert template_document.tables[0].rows[0].cells[0].text == "ID"


class TestCharts:

    def test_visuals_heading_rule(self):
        assert is_visuals_heading("Visuals: Top 25 Initiatives")
        assert is_visuals_heading("Visual Analysis")
        assert not is_visuals_heading("Visuals")
        assert not is_visuals_heading("Top 25 Analysis")

    def test_inserted_under_visuals_heading(self, bar_chart):
        document = Document()
        document.add_heading("Visuals: Top 25 Initiative Analysis", level=2)
        document.add_paragraph("Top 25 Value Analysis")
        document.add_paragraph("Closing notes")

        assert DocumentMerger().insert_charts(document, [bar_chart]) == 1

        texts = _texts(document)
        assert texts.count("Top 25 Value Analysis") == 1
        assert texts[1] == "Top 25 Value Analysis"
        assert texts[-1] == "Closing notes"
        assert len(document.inline_shapes) == 1
        title = document.paragraphs[1]
        assert title.runs[0].bold
        assert title.paragraph_format.keep_with_next

    def test_fallback_heading_at_document_end(self, bar_chart):
        document = Document()
        document.add_paragraph("Body")

        DocumentMerger().insert_charts(document, [bar_chart])

        headings = [n.get_text() for n in DocxTree(document).iter_headings()]
        assert VISUALS_FALLBACK_HEADING in headings
        assert find_visuals_section(document) is not None
        assert len(document.inline_shapes) == 1

    def test_bad_chart_does_not_block_others(self, bar_chart, monkeypatch):
        document = Document()
        document.add_heading("Visual Analysis", level=2)
        merger = DocumentMerger()
        original = merger.insert_chart

        def flaky(cursor, chart):
            if chart.title == "broken":
                raise ValueError("boom")
            original(cursor, chart)

        monkeypatch.setattr(merger, "insert_chart", flaky)
        broken = ChartDescriptor(title="broken")
        assert merger.insert_charts(document, [broken, bar_chart]) == 1
        assert len(document.inline_shapes) == 1

    def test_no_charts(self):
        document = Document()
        assert DocumentMerger().insert_charts(document, []) == 0
        assert _texts(document) == []


class TestRemoveChartPlaceholders:

    def test_scan_window_is_bounded(self):
        document = Document()
        document.add_heading("Visuals: Top 25", level=2)
        for i in range(25):
            document.add_paragraph(f"filler {i}")
        document.add_paragraph("Top 25 AI Category Analysis")
        heading = find_visuals_section(document)

        assert remove_chart_placeholders(heading) == 0
        assert "Top 25 AI Category Analysis" in _texts(document)

    def test_case_insensitive_exact_match(self):
        document = Document()
        document.add_heading("Visual Analysis", level=2)
        document.add_paragraph("top 25 initiative status distribution")
        document.add_paragraph("Top 25 Initiative Status Distribution chart below")
        heading = find_visuals_section(document)

        assert remove_chart_placeholders(heading) == 1
        assert _texts(document) == ["Visual Analysis", "Top 25 Initiative Status Distribution chart below"]


class TestReplaceRenderedSection:

    def test_bold_body_lines_are_replaced_once(self):
        soup = parse_html(
            "<html><body><h2>Current Week Accomplishments</h2>"
            "<ul><li>Plain item one</li><li><strong>Milestone reached</strong></li>"
            "<li>Plain item three</li></ul>"
            "<p><b>Highlight</b></p>"
            "<h2>Next Week Goals</h2><p>Later work</p></body></html>"
        )
        document = HtmlDocumentLoader().load_soup(soup)
        report = StatusReport(
            current_week_status=HtmlContentExtractor().extract_section(soup, CURRENT_WEEK_KEYWORDS),
        )

        assert DocumentMerger().merge(document, report) == ["current week"]

        texts = _texts(document)
        for line in ("Plain item one", "Milestone reached", "Plain item three", "Highlight"):
            assert sum(line in text for text in texts) == 1, line
        assert texts[-2:] == ["Next Week Goals", "Later work"]
