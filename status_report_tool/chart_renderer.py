"""Render chart descriptors to PNG images with matplotlib."""
from __future__ import annotations

import io
import logging
import re
from typing import List, Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.colors as mcolors  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402

from .constants import AXIS_CHART_SIZE, ROUND_CHART_SIZE  # noqa: E402
from .models import ChartDescriptor, ChartKind  # noqa: E402

LOGGER = logging.getLogger(__name__)

RGB_RE = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)",
    re.IGNORECASE,
)

GRID_COLOR = "#DDDDDD"
RENDER_DPI = 150


def _to_mpl_color(value: str):
    """Chart.js colour string to something matplotlib accepts, else ``None``."""
    value = (value or "").strip()
    if not value:
        return None
    match = RGB_RE.fullmatch(value)
    if match:
        r, g, b = (min(float(match.group(i)), 255.0) / 255.0 for i in (1, 2, 3))
        alpha = float(match.group(4)) if match.group(4) else 1.0
        return (r, g, b, max(0.0, min(alpha, 1.0)))
    if mcolors.is_color_like(value):
        return value
    return None


def _colors_for(raw: Sequence[str], count: int) -> Optional[List]:
    converted = [_to_mpl_color(c) for c in raw]
    converted = [c for c in converted if c is not None]
    if not converted:
        return None
    return [converted[i % len(converted)] for i in range(count)]


def chart_size(kind: ChartKind) -> Tuple[float, float]:
    """Width and height in points for the inserted picture."""
    return ROUND_CHART_SIZE if kind.is_round else AXIS_CHART_SIZE


def _new_figure(kind: ChartKind):
    width_pt, height_pt = chart_size(kind)
    fig, ax = plt.subplots(figsize=(width_pt / 72.0, height_pt / 72.0))
    fig.patch.set_facecolor("white")
    return fig, ax


def _style_axes(ax) -> None:
    ax.set_xlabel("Categories", fontsize=8)
    ax.set_ylabel("Values", fontsize=8)
    ax.tick_params(labelsize=7)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.yaxis.grid(True, color=GRID_COLOR, linewidth=0.8, linestyle="--")
    ax.set_axisbelow(True)


def _blank_figure(descriptor: ChartDescriptor):
    fig, ax = _new_figure(descriptor.kind)
    ax.axis("off")
    ax.text(0.5, 0.5, "No data", ha="center", va="center", fontsize=12, color="#888888")
    return fig


def _round_figure(descriptor: ChartDescriptor, count: int):
    fig, ax = _new_figure(descriptor.kind)
    series = descriptor.series[0]
    values = [max(v, 0.0) for v in series.values[:count]]
    labels = descriptor.labels[:count] or [str(i + 1) for i in range(count)]
    if sum(values) <= 0:
        plt.close(fig)
        return _blank_figure(descriptor)
    wedgeprops = {"edgecolor": "white"}
    if descriptor.kind is ChartKind.DOUGHNUT:
        wedgeprops["width"] = 0.45
    wedges, _texts, _autotexts = ax.pie(
        values,
        colors=_colors_for(series.colors, count),
        autopct="%1.0f%%",
        startangle=90,
        counterclock=False,
        pctdistance=0.78 if descriptor.kind is ChartKind.DOUGHNUT else 0.6,
        wedgeprops=wedgeprops,
        textprops={"fontsize": 7},
    )
    ax.axis("equal")
    fig.legend(
        wedges,
        labels,
        loc="lower center",
        ncol=min(3, max(1, count)),
        fontsize=7,
        frameon=False,
    )
    fig.subplots_adjust(bottom=0.22)
    return fig


def _bar_figure(descriptor: ChartDescriptor, count: int):
    fig, ax = _new_figure(descriptor.kind)
    labels = descriptor.labels[:count] or [str(i + 1) for i in range(count)]
    positions = list(range(count))
    group = len(descriptor.series)
    width = 0.8 / group
    for idx, series in enumerate(descriptor.series):
        values = (list(series.values) + [0.0] * count)[:count]
        offsets = [p - 0.4 + width * (idx + 0.5) for p in positions]
        colors = _colors_for(series.colors, count) if group == 1 else None
        if group > 1 and series.colors:
            single = _to_mpl_color(series.colors[0])
            colors = [single] * count if single is not None else None
        if descriptor.kind is ChartKind.BAR:
            bars = ax.barh(offsets, values, height=width, color=colors, label=series.label)
        else:
            bars = ax.bar(offsets, values, width=width, color=colors, label=series.label)
        ax.bar_label(bars, fmt="%g", fontsize=7, padding=2)
    if descriptor.kind is ChartKind.BAR:
        ax.set_yticks(positions)
        ax.set_yticklabels(labels)
        ax.invert_yaxis()
        _style_axes(ax)
        ax.set_xlabel("Values", fontsize=8)
        ax.set_ylabel("Categories", fontsize=8)
        ax.yaxis.grid(False)
        ax.xaxis.grid(True, color=GRID_COLOR, linewidth=0.8, linestyle="--")
    else:
        ax.set_xticks(positions)
        ax.set_xticklabels(labels, rotation=30, ha="right")
        _style_axes(ax)
    if group > 1:
        ax.legend(fontsize=7, frameon=False)
    fig.tight_layout()
    return fig


def _line_figure(descriptor: ChartDescriptor, count: int):
    fig, ax = _new_figure(descriptor.kind)
    labels = descriptor.labels[:count] or [str(i + 1) for i in range(count)]
    for series in descriptor.series:
        values = series.values[:count]
        color = _to_mpl_color(series.colors[0]) if series.colors else None
        positions = list(range(len(values)))
        ax.plot(positions, values, marker="o", linewidth=2, color=color, label=series.label)
        for x, y in zip(positions, values):
            ax.annotate(f"{y:g}", (x, y), textcoords="offset points", xytext=(0, 5), ha="center", fontsize=7)
    ax.set_xticks(list(range(count)))
    ax.set_xticklabels(labels, rotation=30, ha="right")
    _style_axes(ax)
    if len(descriptor.series) > 1:
        ax.legend(fontsize=7, frameon=False)
    fig.tight_layout()
    return fig


def build_figure(descriptor: ChartDescriptor):
    count = descriptor.point_count
    if count == 0:
        return _blank_figure(descriptor)
    if descriptor.kind.is_round:
        return _round_figure(descriptor, count)
    if descriptor.kind is ChartKind.LINE:
        return _line_figure(descriptor, count)
    return _bar_figure(descriptor, count)


def render_chart(descriptor: ChartDescriptor) -> io.BytesIO:
    """PNG bytes for ``descriptor``, rewound and ready for ``add_picture``."""
    fig = build_figure(descriptor)
    try:
        buffer = io.BytesIO()
        fig.savefig(buffer, format="png", dpi=RENDER_DPI, facecolor="white")
    finally:
        plt.close(fig)
    buffer.seek(0)
    LOGGER.debug("Rendered %s chart %r (%d bytes)", descriptor.kind.value, descriptor.title, buffer.getbuffer().nbytes)
    return buffer
