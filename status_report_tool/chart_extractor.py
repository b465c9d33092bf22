"""Recover chart definitions from Chart.js initialisers embedded in HTML.

Charts are looked up by the canvas id they are bound to
(``document.getElementById('statusChart')``). The configuration literal
passed to ``new Chart(...)`` is cut out with a brace matcher and its
``labels``, ``data`` and ``backgroundColor`` arrays are read with regular
expressions; the literal is never evaluated.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .constants import KNOWN_CHARTS, VISUALS_INSERTION_HINT
from .models import ChartDescriptor, ChartKind, ChartSeries

LOGGER = logging.getLogger(__name__)

NEW_CHART_RE = re.compile(r"new\s+Chart\s*\(")
QUOTED_RE = re.compile(r"'([^']*)'|\"([^\"]*)\"")
TYPE_RE = re.compile(r"""(?<![\w$])['"]?type['"]?\s*:\s*['"]([A-Za-z]+)['"]""")
LABELS_RE = re.compile(r"""(?<![\w$])['"]?labels['"]?\s*:\s*\[(.*?)\]""", re.DOTALL)
DATA_RE = re.compile(r"""(?<![\w$])['"]?data['"]?\s*:\s*\[([^\[\]]*)\]""", re.DOTALL)
COLORS_RE = re.compile(
    r"""(?<![\w$])['"]?backgroundColor['"]?\s*:\s*(?:\[(.*?)\]|('[^']*'|"[^"]*"))""",
    re.DOTALL,
)
SERIES_LABEL_RE = re.compile(r"""(?<![\w$])['"]?label['"]?\s*:\s*('[^']*'|"[^"]*")""")
DATASETS_RE = re.compile(r"""(?<![\w$])['"]?datasets['"]?\s*:\s*\[""")


def _element_id_re(chart_id: str) -> re.Pattern[str]:
    return re.compile(r"getElementById\(\s*['\"]" + re.escape(chart_id) + r"['\"]\s*\)")


def extract_string_array(array_text: str) -> List[str]:
    values = []
    for match in QUOTED_RE.finditer(array_text or ""):
        values.append(match.group(1) if match.group(1) is not None else match.group(2))
    return values


def parse_number(token: str) -> float:
    try:
        return float(token.strip())
    except (TypeError, ValueError):
        return 0.0


def extract_number_array(array_text: str) -> List[float]:
    tokens = [t.strip() for t in (array_text or "").split(",")]
    return [parse_number(t) for t in tokens if t]


def match_balanced(text: str, start: int, opener: str = "{", closer: str = "}") -> Optional[Tuple[int, int]]:
    """Span of the bracketed literal opening at ``start``, skipping quoted strings."""
    if start >= len(text) or text[start] != opener:
        return None
    depth = 0
    quote: Optional[str] = None
    idx = start
    while idx < len(text):
        ch = text[idx]
        if quote:
            if ch == "\\":
                idx += 2
                continue
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return start, idx + 1
        idx += 1
    return None


def find_chart_config(html_text: str, chart_id: str) -> Optional[str]:
    """Configuration literal of the first ``new Chart(...)`` after the canvas lookup."""
    anchor = _element_id_re(chart_id).search(html_text)
    if anchor is None:
        return None
    ctor = NEW_CHART_RE.search(html_text, anchor.end())
    if ctor is None:
        return None
    brace = html_text.find("{", ctor.end())
    if brace < 0:
        return None
    span = match_balanced(html_text, brace)
    if span is None:
        return None
    return html_text[span[0]:span[1]]


def _split_dataset_objects(config: str) -> List[str]:
    match = DATASETS_RE.search(config)
    if match is None:
        return []
    array_span = match_balanced(config, match.end() - 1, "[", "]")
    if array_span is None:
        return []
    body = config[array_span[0] + 1:array_span[1] - 1]
    objects = []
    pos = 0
    while True:
        brace = body.find("{", pos)
        if brace < 0:
            break
        span = match_balanced(body, brace)
        if span is None:
            break
        objects.append(body[span[0]:span[1]])
        pos = span[1]
    return objects


def _series_from(text: str, default_label: str) -> ChartSeries:
    data_match = DATA_RE.search(text)
    colors: List[str] = []
    colors_match = COLORS_RE.search(text)
    if colors_match:
        colors = extract_string_array(colors_match.group(1) or colors_match.group(2) or "")
    label_match = SERIES_LABEL_RE.search(text)
    label = extract_string_array(label_match.group(1))[0] if label_match else default_label
    return ChartSeries(
        label=label,
        values=extract_number_array(data_match.group(1)) if data_match else [],
        colors=colors,
    )


def parse_chart_config(config: str, title: str, default_kind: ChartKind) -> ChartDescriptor:
    labels_match = LABELS_RE.search(config)
    labels = extract_string_array(labels_match.group(1)) if labels_match else []

    type_match = TYPE_RE.search(config)
    kind = ChartKind.parse(type_match.group(1), default_kind) if type_match else default_kind

    datasets = _split_dataset_objects(config)
    series = [_series_from(dataset, title) for dataset in datasets]
    if not series:
        series = [_series_from(config, title)]
    return ChartDescriptor(
        title=title,
        kind=kind,
        labels=labels,
        series=series,
        insertion_hint=VISUALS_INSERTION_HINT,
    )


class ChartConfigExtractor:
    """Finds the well-known status report charts in raw HTML text."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        charts: Optional[Dict[str, Tuple[str, str]]] = None,
    ):
        self.logger = logger or LOGGER
        self.charts = charts if charts is not None else KNOWN_CHARTS

    # ------------------------------------------------------------------
    def extract_chart(self, html_text: str, chart_id: str, title: str, kind: ChartKind) -> Optional[ChartDescriptor]:
        try:
            config = find_chart_config(html_text, chart_id)
            if config is None:
                self.logger.warning("Could not find chart data for %s", chart_id)
                return None
            chart = parse_chart_config(config, title, kind)
            self.logger.info(
                "Extracted chart: %s with %d data points",
                title,
                sum(len(s.values) for s in chart.series),
            )
            return chart
        except Exception:
            self.logger.exception("Error extracting chart %s", chart_id)
            return None

    # ------------------------------------------------------------------
    def extract_charts(self, html_text: str) -> List[ChartDescriptor]:
        charts: List[ChartDescriptor] = []
        for chart_id, (title, kind_name) in self.charts.items():
            kind = ChartKind.parse(kind_name, ChartKind.PIE)
            chart = self.extract_chart(html_text, chart_id, title, kind)
            if chart is not None:
                charts.append(chart)
        self.logger.info("Extracted %d charts from HTML", len(charts))
        return charts

    # ------------------------------------------------------------------
    def extract_from_file(self, html_path: str) -> List[ChartDescriptor]:
        try:
            text = Path(html_path).read_text(encoding="utf-8", errors="replace")
        except OSError:
            self.logger.exception("Error extracting chart data from HTML")
            return []
        return self.extract_charts(text)
