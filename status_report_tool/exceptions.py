"""Exception types raised by the status report converter."""
from __future__ import annotations


class StatusReportError(RuntimeError):
    """Base class for converter failures."""


class ValidationError(StatusReportError):
    """Raised when an input/output path or the HTML content is rejected."""


class ConversionError(StatusReportError):
    """Raised when the document tree cannot be loaded or saved."""
