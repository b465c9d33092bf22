"""Fixed vocabulary, titles and dimensions shared across the converter."""
from __future__ import annotations

from typing import Dict, Sequence, Tuple

APPLICATION_TITLE = "Enterprise AI Status Report Converter"
REPORT_HEADER_TEXT = "Enterprise AI Status Report"

HTML_EXTENSIONS: Tuple[str, ...] = (".html", ".htm")
OUTPUT_EXTENSION = ".docx"

BULLET_MARKER = "•"


class StatusMessages:
    CONVERTING = "Converting..."
    SUCCESS = "Conversion completed successfully!"
    FAILED = "Conversion failed. Check logs for details."
    EVALUATION_MODE = "Warning: Running in evaluation mode"
    CURRENT_WEEK_UPDATED = "Current week status updated"
    NEXT_WEEK_UPDATED = "Next week goals updated"


# Section keyword sets (case-insensitive substrings, first match wins)
CURRENT_WEEK_KEYWORDS: Sequence[str] = ("current week", "this week")
NEXT_WEEK_KEYWORDS: Sequence[str] = ("next week", "upcoming")
RISK_KEYWORDS: Sequence[str] = ("risk", "risks")

# Heuristic vocabulary for heading classification in the output tree
KNOWN_HEADING_WORDS: Sequence[str] = (
    "week",
    "accomplishment",
    "planned",
    "risk",
    "status",
    "initiative",
    "goal",
    "next step",
)
MAJOR_SECTION_WORDS: Sequence[str] = (
    "accomplishment",
    "planned",
    "risk",
    "top 25",
    "initiative",
    "next week",
    "current week",
)

# Risk table columns: (title, width in points)
RISK_TABLE_COLUMNS: Sequence[Tuple[str, float]] = (
    ("ID", 50),
    ("Description", 150),
    ("Impact", 100),
    ("Mitigation", 150),
    ("Status", 70),
    ("Date Identified", 80),
)
RISK_DATE_FORMAT = "%m/%d/%Y"

DEFAULT_FONT = "Arial"
HEADER_FONT_SIZE = 11
FOOTER_FONT_SIZE = 10

# Well-known chart canvases: element id -> (title, default chart kind name)
KNOWN_CHARTS: Dict[str, Tuple[str, str]] = {
    "statusChart": ("Top 25 Initiative Status Distribution", "doughnut"),
    "valueChart": ("Top 25 Value Analysis", "bar"),
    "categoryChart": ("Top 25 AI Category Analysis", "pie"),
}
CHART_TITLES: Tuple[str, ...] = tuple(title for title, _ in KNOWN_CHARTS.values())
VISUALS_FALLBACK_HEADING = "Visuals: Top 25 Initiative Analysis"
VISUALS_INSERTION_HINT = "Visuals"

# Stale chart-title placeholders are only searched for in this many nodes
# after the visuals heading. This is an approximation, not an exhaustive scan.
CHART_PLACEHOLDER_SCAN_LIMIT = 20

# Chart dimensions in points
ROUND_CHART_SIZE: Tuple[float, float] = (288, 288)
AXIS_CHART_SIZE: Tuple[float, float] = (432, 288)
CHART_BORDER_WEIGHT_PT = 2

HEADING_MIN_SPACE_AFTER_PT = 6
HEADING_MIN_SPACE_BEFORE_PT = 12
HEADING_HEURISTIC_MIN_FONT_PT = 14
HEADING_HEURISTIC_MAX_LENGTH = 200

LOG_FILE_NAME = "statusreport.log"
LOG_RETAINED_FILE_COUNT = 7
