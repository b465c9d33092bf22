"""Tests for report data structures."""
from datetime import datetime

from status_report_tool.models import (
    ChartDescriptor,
    ChartKind,
    ChartSeries,
    RiskRecord,
    RiskStatus,
    StatusReport,
)


class TestRiskRecord:

    def test_defaults(self):
        risk = RiskRecord(description="Something")
        assert len(risk.id) == 8
        assert risk.status == "Open"
        assert isinstance(risk.date_identified, datetime)

    def test_blank_id_and_status_filled(self):
        risk = RiskRecord(description="x", status="  ", id="")
        assert risk.status == "Open"
        assert len(risk.id) == 8

    def test_status_canonicalised_or_preserved(self):
        assert RiskRecord(status="in_progress").status == "In Progress"
        assert RiskRecord(status="MITIGATED").status == "Mitigated"
        assert RiskRecord(status="Blocked on vendor").status == "Blocked on vendor"

    def test_from_row(self):
        when = datetime(2024, 1, 2)
        risk = RiskRecord.from_row([" Outage ", "High", "Failover", ""], identified=when)
        assert (risk.description, risk.impact, risk.mitigation, risk.status) == ("Outage", "High", "Failover", "Open")
        assert risk.date_text == "01/02/2024"
        assert risk.as_table_row()[1:] == ["Outage", "High", "Failover", "Open", "01/02/2024"]


def test_risk_status_parse():
    assert RiskStatus.parse("closed") is RiskStatus.CLOSED
    assert RiskStatus.parse("In-Progress") is RiskStatus.IN_PROGRESS
    assert RiskStatus.parse("unknown") is None


class TestStatusReport:

    def test_has_content(self):
        assert not StatusReport().has_content()
        assert not StatusReport(current_week_status="   ").has_content()
        assert StatusReport(next_week_goals="Plan").has_content()
        assert StatusReport(risks=[RiskRecord("r")]).has_content()

    def test_add_and_delete_risk(self):
        report = StatusReport()
        first = report.add_risk()
        second = report.add_risk()
        assert first.id != second.id
        assert report.delete_risk(first.id)
        assert report.risks == [second]
        assert report.delete_risk(second)
        assert not report.delete_risk("missing")

    def test_risks_frame_keeps_order(self):
        report = StatusReport(risks=[RiskRecord("b", id="00000002"), RiskRecord("a", id="00000001")])
        frame = report.risks_frame()
        assert list(frame.columns) == ["ID", "Description", "Impact", "Mitigation", "Status", "Date Identified"]
        assert frame["Description"].tolist() == ["b", "a"]

    def test_empty_risks_frame(self):
        frame = StatusReport().risks_frame()
        assert frame.empty
        assert len(frame.columns) == 6


class TestChartDescriptor:

    def test_shorter_length_wins(self):
        chart = ChartDescriptor("t", labels=["a", "b", "c"], series=[ChartSeries(values=[1, 2])])
        assert chart.point_count == 2
        chart = ChartDescriptor("t", labels=["a"], series=[ChartSeries(values=[1, 2])])
        assert chart.point_count == 1

    def test_no_data(self):
        assert not ChartDescriptor("t").has_data()
        assert ChartDescriptor("t", series=[ChartSeries(values=[4])]).has_data()


def test_chart_kind_parse():
    assert ChartKind.parse("Doughnut", ChartKind.PIE) is ChartKind.DOUGHNUT
    assert ChartKind.parse("horizontalBar", ChartKind.PIE) is ChartKind.BAR
    assert ChartKind.parse("radar", ChartKind.LINE) is ChartKind.LINE
    assert ChartKind.PIE.is_round and not ChartKind.COLUMN.is_round
