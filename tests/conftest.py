"""Shared fixtures: sample HTML reports and in-memory Word documents."""
import pytest
from docx import Document

from status_report_tool.html_preprocessor import parse_html


SAMPLE_REPORT_HTML = """<!DOCTYPE html>
<html>
<head><title>Weekly Status</title></head>
<body>
<h1>Enterprise AI Weekly Status</h1>
<h2>Current Week Accomplishments</h2>
<ul>
  <li>Finished the data model</li>
  <li>Shipped the HTML extractor</li>
</ul>
<h2>Next Week Goals</h2>
<p>Start work on the merge engine</p>
<h2>Risks</h2>
<table>
  <tr><th>Description</th><th>Impact</th><th>Mitigation</th><th>Status</th></tr>
  <tr><td>Vendor delivery slips</td><td>High</td><td>Escalate to sponsor</td><td>In Progress</td></tr>
  <tr><td>Staff shortage</td><td>Medium</td><td>Bring in a contractor</td><td></td></tr>
</table>
</body>
</html>
"""

CHART_SCRIPT = """
<h2>Visuals: Top 25 Initiative Analysis</h2>
<p>Top 25 Value Analysis</p>
<canvas id="valueChart"></canvas>
<script>
  var ctx = document.getElementById('valueChart').getContext('2d');
  new Chart(ctx, {
    type: 'bar',
    data: {
      labels: ['Revenue', 'Savings', 'Risk'],
      datasets: [{ label: 'Value', data: [12, 7.5, 3], backgroundColor: ['#4CAF50', 'rgba(54, 162, 235, 0.8)', '#fff'] }]
    }
  });
</script>
"""


@pytest.fixture
def sample_html():
    return SAMPLE_REPORT_HTML


@pytest.fixture
def sample_soup(sample_html):
    return parse_html(sample_html)


@pytest.fixture
def sample_html_file(tmp_path, sample_html):
    path = tmp_path / "report.html"
    path.write_text(sample_html, encoding="utf-8")
    return path


@pytest.fixture
def chart_html_file(tmp_path, sample_html):
    path = tmp_path / "charts.html"
    path.write_text(sample_html.replace("</body>", CHART_SCRIPT + "</body>"), encoding="utf-8")
    return path


@pytest.fixture
def template_document():
    """Output document with the three report sections and stale content."""
    document = Document()
    document.add_heading("Enterprise AI Weekly Status", level=1)
    document.add_heading("Current Week Accomplishments", level=2)
    document.add_paragraph("Old accomplishment text")
    document.add_heading("Next Week Goals", level=2)
    document.add_paragraph("Old goal text")
    document.add_heading("Risks", level=2)
    return document


CONFIG_ENV_NAMES = (
    "LOG_LEVEL",
    "LOG_PATH",
    "LICENSE_PATH",
    "TEMPLATE_PATH",
    "ALLOW_CHART_SCRIPTS",
    "REPLACE_SECTION_CONTENT",
    "MAJOR_HEADING_PAGE_BREAKS",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset converter settings; anything a .env file adds is removed afterwards."""
    for name in CONFIG_ENV_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
