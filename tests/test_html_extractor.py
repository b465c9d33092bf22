"""Tests for section and risk-table extraction from HTML."""
from datetime import datetime

from status_report_tool.constants import CURRENT_WEEK_KEYWORDS, NEXT_WEEK_KEYWORDS, RISK_KEYWORDS
from status_report_tool.html_extractor import HtmlContentExtractor, format_extracted_content
from status_report_tool.html_preprocessor import parse_html
from status_report_tool.structure import HtmlTree, find_section


FIXED_NOW = datetime(2024, 3, 4, 9, 30)


def _extractor():
    return HtmlContentExtractor(clock=lambda: FIXED_NOW)


class TestExtractReport:
    """End-to-end extraction of a complete status report."""

    def test_sections_and_risks(self, sample_html_file):
        report = _extractor().extract_report(str(sample_html_file))

        assert report.current_week_status == "• Finished the data model\n• Shipped the HTML extractor"
        assert report.next_week_goals == "Start work on the merge engine"
        assert [r.description for r in report.risks] == ["Vendor delivery slips", "Staff shortage"]
        assert report.risks[0].status == "In Progress"
        assert report.risks[1].status == "Open"
        assert all(r.date_identified == FIXED_NOW for r in report.risks)
        assert report.input_path == str(sample_html_file)

    def test_missing_file_gives_empty_report(self, tmp_path):
        report = _extractor().extract_report(str(tmp_path / "missing.html"))
        assert not report.has_content()


class TestExtractSection:

    def test_stops_at_next_heading(self, sample_soup):
        content = _extractor().extract_section(sample_soup, CURRENT_WEEK_KEYWORDS)
        assert "merge engine" not in content

    def test_blank_paragraphs_skipped(self):
        soup = parse_html(
            "<h2>This Week</h2><p>First</p><p>   </p><p></p><p>Second</p><h2>Other</h2><p>Hidden</p>"
        )
        content = _extractor().extract_section(soup, CURRENT_WEEK_KEYWORDS)
        assert content == "First\nSecond"

    def test_missing_heading_gives_empty_text(self, sample_soup):
        assert _extractor().extract_section(sample_soup, ("quarterly outlook",)) == ""

    def test_nested_list_items_are_separate_lines(self):
        soup = parse_html("<h2>Upcoming</h2><ul><li>Parent<ul><li>Child</li></ul></li></ul>")
        content = _extractor().extract_section(soup, NEXT_WEEK_KEYWORDS)
        assert content == "• Parent\n• Child"

    def test_format_extracted_content(self):
        assert format_extracted_content("  a\r\n\r\n   b  \n") == "a\nb"


class TestExtractRiskTable:

    def test_header_row_and_short_rows_skipped(self):
        soup = parse_html(
            "<h2>Risks</h2><table>"
            "<tr><td>Description</td><td>Impact</td><td>Mitigation</td><td>Status</td></tr>"
            "<tr><td>Too short</td><td>Low</td></tr>"
            "<tr><td></td><td>Low</td><td>None</td><td>Open</td></tr>"
            "<tr><td>Budget cut</td><td>High</td><td>Re-plan</td><td>Closed</td></tr>"
            "</table>"
        )
        risks = _extractor().extract_risk_table(soup, RISK_KEYWORDS)
        assert len(risks) == 1
        assert risks[0].description == "Budget cut"
        assert risks[0].status == "Closed"

    def test_row_order_preserved(self):
        rows = "".join(
            f"<tr><td>Risk {i}</td><td>I</td><td>M</td><td>Open</td></tr>" for i in range(5)
        )
        soup = parse_html(f"<h3>Key Risks</h3><div><table><tr><th>h</th></tr>{rows}</table></div>")
        risks = _extractor().extract_risk_table(soup, RISK_KEYWORDS)
        assert [r.description for r in risks] == [f"Risk {i}" for i in range(5)]

    def test_no_table_gives_no_risks(self):
        soup = parse_html("<h2>Risks</h2><p>None this week</p>")
        assert _extractor().extract_risk_table(soup, RISK_KEYWORDS) == []

    def test_empty_sibling_table_is_still_the_risk_table(self):
        soup = parse_html(
            "<h2>Risks</h2>"
            "<div><table><tr><th>h</th></tr>"
            "<tr><td>Other table</td><td>I</td><td>M</td><td>Open</td></tr></table></div>"
            "<table></table>"
        )
        extractor = _extractor()
        heading = find_section(HtmlTree(soup), RISK_KEYWORDS)

        assert extractor.find_risk_table(heading) is soup.find_all("table")[1]
        assert extractor.extract_risk_table(soup, RISK_KEYWORDS) == []
