"""Writes the risk register as a Word table."""
from __future__ import annotations

import logging
from typing import Optional

from docx.table import Table

from .constants import RISK_TABLE_COLUMNS
from .docx_builder import DocumentCursor, set_repeat_table_header
from .models import StatusReport

LOGGER = logging.getLogger(__name__)


class RiskTableBuilder:
    """Header row plus one row per risk, fixed column widths, bold header."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or LOGGER

    # ------------------------------------------------------------------
    def build(self, cursor: DocumentCursor, report: StatusReport) -> Optional[Table]:
        if not report.risks:
            return None
        frame = report.risks_frame()
        rows = [list(frame.columns)]
        rows.extend(frame.fillna("").astype(str).values.tolist())
        widths = [width for _, width in RISK_TABLE_COLUMNS]
        table = cursor.insert_table(rows, widths=widths, header_bold=True)
        set_repeat_table_header(table.rows[0])
        self.logger.info("Inserted risk table with %d rows", len(report.risks))
        return table
