"""Tests for Chart.js configuration extraction."""
from status_report_tool.chart_extractor import (
    ChartConfigExtractor,
    extract_number_array,
    find_chart_config,
    match_balanced,
)
from status_report_tool.models import ChartKind


def _script(chart_id, config):
    return (
        f"<canvas id=\"{chart_id}\"></canvas><script>"
        f"var ctx = document.getElementById('{chart_id}');"
        f"new Chart(ctx, {config});</script>"
    )


class TestChartConfigExtractor:

    def test_minimal_literal(self):
        html = _script(
            "statusChart",
            "{labels:['A','B'], datasets:[{data:[1,2], backgroundColor:['#fff','#000']}]}",
        )
        charts = ChartConfigExtractor().extract_charts(html)

        assert len(charts) == 1
        chart = charts[0]
        assert chart.title == "Top 25 Initiative Status Distribution"
        assert chart.kind is ChartKind.DOUGHNUT
        assert chart.labels == ["A", "B"]
        assert len(chart.series) == 1
        assert chart.series[0].values == [1, 2]
        assert chart.series[0].colors == ["#fff", "#000"]

    def test_missing_identifiers_yield_nothing(self):
        assert ChartConfigExtractor().extract_charts("<p>No charts here</p>") == []

    def test_type_override_and_multiple_datasets(self):
        html = _script(
            "valueChart",
            """{
              type: "line",
              data: {
                labels: ["Q1", "Q2", "Q3"],
                datasets: [
                  {label: "Plan", data: [1, 2, 3], backgroundColor: "#123456"},
                  {label: "Actual", data: [1, 1.5, n/a]}
                ]
              },
              options: {plugins: {title: {display: true, text: "Ignored {braces}"}}}
            }""",
        )
        chart = ChartConfigExtractor().extract_charts(html)[0]

        assert chart.kind is ChartKind.LINE
        assert chart.labels == ["Q1", "Q2", "Q3"]
        assert [s.label for s in chart.series] == ["Plan", "Actual"]
        assert chart.series[0].colors == ["#123456"]
        assert chart.series[1].values == [1.0, 1.5, 0.0]

    def test_each_chart_found_independently(self):
        html = _script("categoryChart", "{data:{labels:['x'],datasets:[{data:[4]}]}}") + _script(
            "statusChart", "{data:{labels:['y','z'],datasets:[{data:[5,6]}]}}"
        )
        charts = ChartConfigExtractor().extract_charts(html)
        titles = {c.title: c for c in charts}

        assert titles["Top 25 AI Category Analysis"].kind is ChartKind.PIE
        assert titles["Top 25 AI Category Analysis"].labels == ["x"]
        assert titles["Top 25 Initiative Status Distribution"].series[0].values == [5.0, 6.0]

    def test_extract_from_missing_file(self, tmp_path):
        assert ChartConfigExtractor().extract_from_file(str(tmp_path / "nope.html")) == []


class TestHelpers:

    def test_unparsable_numbers_become_zero(self):
        assert extract_number_array("1, x, 3.5,") == [1.0, 0.0, 3.5]

    def test_match_balanced_skips_quoted_braces(self):
        text = "{a: '}', b: {c: 1}} tail"
        assert match_balanced(text, 0) == (0, text.index(" tail"))

    def test_unterminated_config(self):
        assert find_chart_config("getElementById('valueChart'); new Chart(ctx, {labels: [", "valueChart") is None
