"""Data structures for one HTML-to-Word status report conversion.

A :class:`StatusReport` is built by the HTML extractor, may be edited by a
person, and is consumed once by the merge engine. None of the records here
hold references back into the document trees they came from.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Union
import uuid

import pandas as pd

from .constants import RISK_DATE_FORMAT, RISK_TABLE_COLUMNS


def new_risk_id() -> str:
    """Return a fresh 8-character risk identifier."""
    return uuid.uuid4().hex[:8]


class RiskStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    MITIGATED = "Mitigated"
    CLOSED = "Closed"

    @classmethod
    def parse(cls, value: str) -> Optional["RiskStatus"]:
        """Match a free-text status leniently; ``None`` when it is not a known one."""
        key = " ".join(str(value or "").replace("_", " ").replace("-", " ").split()).lower()
        for status in cls:
            if status.value.lower() == key:
                return status
        return None


class ChartKind(str, Enum):
    PIE = "pie"
    DOUGHNUT = "doughnut"
    BAR = "bar"
    COLUMN = "column"
    LINE = "line"

    @classmethod
    def parse(cls, value: str, default: "ChartKind") -> "ChartKind":
        key = str(value or "").strip().lower()
        if key == "horizontalbar":
            return cls.BAR
        for kind in cls:
            if kind.value == key:
                return kind
        return default

    @property
    def is_round(self) -> bool:
        return self in (ChartKind.PIE, ChartKind.DOUGHNUT)


@dataclass
class RiskRecord:
    description: str = ""
    impact: str = ""
    mitigation: str = ""
    status: str = RiskStatus.OPEN.value
    date_identified: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_risk_id)

    def __post_init__(self) -> None:
        if not str(self.id or "").strip():
            self.id = new_risk_id()
        if not str(self.status or "").strip():
            self.status = RiskStatus.OPEN.value
        known = RiskStatus.parse(self.status)
        if known is not None:
            self.status = known.value

    @classmethod
    def from_row(cls, cells: Sequence[str], identified: Optional[datetime] = None) -> "RiskRecord":
        """Build a record from description/impact/mitigation/status cells."""
        values = [str(c or "").strip() for c in cells] + [""] * 4
        return cls(
            description=values[0],
            impact=values[1],
            mitigation=values[2],
            status=values[3] or RiskStatus.OPEN.value,
            date_identified=identified or datetime.now(),
        )

    @property
    def date_text(self) -> str:
        return self.date_identified.strftime(RISK_DATE_FORMAT)

    def as_table_row(self) -> List[str]:
        return [
            self.id,
            self.description,
            self.impact,
            self.mitigation,
            self.status,
            self.date_text,
        ]


@dataclass
class ChartSeries:
    label: str = ""
    values: List[float] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)


@dataclass
class ChartDescriptor:
    title: str
    kind: ChartKind = ChartKind.PIE
    labels: List[str] = field(default_factory=list)
    series: List[ChartSeries] = field(default_factory=list)
    insertion_hint: str = ""

    @property
    def point_count(self) -> int:
        """Number of plottable points; label/value length mismatches keep the shorter."""
        if not self.series:
            return 0
        values = max(len(s.values) for s in self.series)
        if self.labels:
            return min(len(self.labels), values)
        return values

    def has_data(self) -> bool:
        return self.point_count > 0


@dataclass
class StatusReport:
    input_path: str = ""
    output_path: str = ""
    current_week_status: str = ""
    next_week_goals: str = ""
    risks: List[RiskRecord] = field(default_factory=list)

    def has_content(self) -> bool:
        return bool(
            self.current_week_status.strip()
            or self.next_week_goals.strip()
            or self.risks
        )

    # ------------------------------------------------------------------
    def add_risk(self) -> RiskRecord:
        risk = RiskRecord()
        self.risks.append(risk)
        return risk

    # ------------------------------------------------------------------
    def delete_risk(self, risk: Union[RiskRecord, str]) -> bool:
        risk_id = risk.id if isinstance(risk, RiskRecord) else str(risk)
        for idx, existing in enumerate(self.risks):
            if existing.id == risk_id:
                del self.risks[idx]
                return True
        return False

    # ------------------------------------------------------------------
    def risks_frame(self) -> pd.DataFrame:
        """Risk register as a DataFrame, one row per record in insertion order."""
        columns = [title for title, _ in RISK_TABLE_COLUMNS]
        rows = [risk.as_table_row() for risk in self.risks]
        return pd.DataFrame(rows, columns=columns, dtype=str)
