"""Warnings raised while rendering HTML into the Word document."""
from __future__ import annotations

from enum import Enum
import logging
from typing import List, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class WarningKind(str, Enum):
    UNEXPECTED_CONTENT = "unexpected-content"
    MINOR_FORMATTING_LOSS = "minor-formatting-loss"
    MAJOR_FORMATTING_LOSS = "major-formatting-loss"
    OTHER = "other"


class ConversionWarningCallback:
    """Routes loader warnings to the logger and keeps them for the result."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or LOGGER
        self.warnings: List[Tuple[WarningKind, str]] = []

    def __call__(self, kind: WarningKind, description: str) -> None:
        self.warnings.append((kind, description))
        if kind is WarningKind.UNEXPECTED_CONTENT:
            self.logger.warning("Unexpected content warning: %s", description)
        elif kind is WarningKind.MINOR_FORMATTING_LOSS:
            self.logger.debug("Minor formatting loss: %s", description)
        elif kind is WarningKind.MAJOR_FORMATTING_LOSS:
            self.logger.warning("Major formatting loss: %s", description)
        else:
            self.logger.info("Conversion warning (%s): %s", kind.value, description)

    def messages(self) -> List[str]:
        return [f"{kind.value}: {description}" for kind, description in self.warnings]
