"""Core package for the HTML status report to Word converter."""

from .chart_extractor import ChartConfigExtractor
from .config import ConverterConfig, LicenseCapability
from .converter import ConversionResult, ConversionService
from .exceptions import ConversionError, StatusReportError, ValidationError
from .html_extractor import HtmlContentExtractor
from .merge_engine import DocumentMerger
from .models import ChartDescriptor, ChartKind, ChartSeries, RiskRecord, RiskStatus, StatusReport

__all__ = [
    "ChartConfigExtractor",
    "ChartDescriptor",
    "ChartKind",
    "ChartSeries",
    "ConversionError",
    "ConversionResult",
    "ConversionService",
    "ConverterConfig",
    "DocumentMerger",
    "HtmlContentExtractor",
    "LicenseCapability",
    "RiskRecord",
    "RiskStatus",
    "StatusReport",
    "StatusReportError",
    "ValidationError",
]
