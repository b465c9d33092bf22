"""End-to-end conversion: validate, load, merge, lay out and save.

Only input validation, loading the document and saving it are fatal. Chart
extraction, the content merge, chart insertion, each layout step and
temp-file cleanup are isolated so a failure there is logged and the conversion carries on.
"""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from pathlib import Path
import tempfile
from typing import Callable, List, Optional

from docx.document import Document as DocxDocument

from .chart_extractor import ChartConfigExtractor
from .config import ConverterConfig, LicenseCapability
from .constants import StatusMessages
from .conversion_warnings import ConversionWarningCallback
from .docx_builder import HtmlDocumentLoader, apply_watermark
from .exceptions import ConversionError, ValidationError
from .html_preprocessor import preprocess_file
from .layout import configure_headers_and_footers, ensure_table_header_repetition, fix_heading_layout
from .merge_engine import DocumentMerger
from .models import ChartDescriptor, StatusReport
from .validation import validate_html_file, validate_output_path

LOGGER = logging.getLogger(__name__)

EVALUATION_WATERMARK = "EVALUATION"


@dataclass
class ConversionResult:
    success: bool
    message: str
    output_path: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


class ConversionService:
    """Runs one conversion per call; nothing is shared between calls."""

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        logger: Optional[logging.Logger] = None,
        license_capability: Optional[LicenseCapability] = None,
    ):
        self.config = config or ConverterConfig()
        self.logger = logger or LOGGER
        self.license = license_capability or LicenseCapability.load(self.config.license_path, self.logger)
        self._executor: Optional[ThreadPoolExecutor] = None

    # ------------------------------------------------------------------
    def is_licensed(self) -> bool:
        return self.license.is_licensed

    # ------------------------------------------------------------------
    def validate(self, report: StatusReport) -> None:
        """Raise :class:`ValidationError` for an unusable input or output path."""
        validate_html_file(report.input_path, allow_scripts=self.config.allow_chart_scripts)
        validate_output_path(report.output_path)

    # ------------------------------------------------------------------
    def convert(self, report: StatusReport) -> ConversionResult:
        try:
            self.validate(report)
        except ValidationError as exc:
            self.logger.error("Validation failed: %s", exc)
            return ConversionResult(False, str(exc))

        self.logger.info("Starting conversion from %s to %s", report.input_path, report.output_path)
        warnings = ConversionWarningCallback(self.logger)
        temp_dir = tempfile.mkdtemp(prefix="statusreport-")
        try:
            charts = self._extract_charts(report.input_path)
            cleaned = preprocess_file(report.input_path, self.logger, temp_dir)
            document = self._load(cleaned, report.input_path, warnings)

            merger = DocumentMerger(self.logger, self.config.replace_section_content)
            self._isolated("content merge", merger.merge, document, report)
            self._isolated("chart insertion", DocumentMerger(self.logger).insert_charts, document, charts)
            self._isolated(
                "heading layout",
                fix_heading_layout,
                document,
                self.config.major_heading_page_breaks,
                self.logger,
            )
            self._isolated("table header repetition", ensure_table_header_repetition, document, self.logger)
            self._isolated("headers and footers", configure_headers_and_footers, document)
            if not self.is_licensed():
                self._isolated("evaluation watermark", apply_watermark, document, EVALUATION_WATERMARK)

            self._save(document, report.output_path)
        except ConversionError as exc:
            self.logger.error("Conversion failed: %s", exc)
            return ConversionResult(False, StatusMessages.FAILED, warnings=warnings.messages())
        except Exception:
            self.logger.exception("Error during conversion")
            return ConversionResult(False, StatusMessages.FAILED, warnings=warnings.messages())
        finally:
            self._cleanup(temp_dir)

        self.logger.info("Document saved successfully to %s", report.output_path)
        message = StatusMessages.SUCCESS
        if not self.is_licensed():
            message = f"{message} ({StatusMessages.EVALUATION_MODE})"
        return ConversionResult(True, message, str(report.output_path), warnings.messages())

    # ------------------------------------------------------------------
    def convert_async(self, report: StatusReport) -> "Future[ConversionResult]":
        """Run :meth:`convert` on a single background worker."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="status-report")
        return self._executor.submit(self.convert, report)

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    def _extract_charts(self, html_path: str) -> List[ChartDescriptor]:
        try:
            return ChartConfigExtractor(self.logger).extract_from_file(html_path)
        except Exception:
            self.logger.exception("Chart extraction failed")
            return []

    # ------------------------------------------------------------------
    def _load(self, html_path: str, source_path: str, warnings: ConversionWarningCallback) -> DocxDocument:
        loader = HtmlDocumentLoader(self.logger, template_path=self.config.template_path)
        base_uri = str(Path(source_path).resolve().parent)
        try:
            return loader.load(html_path, base_uri=base_uri, warning_callback=warnings)
        except Exception as exc:
            self.logger.exception("Failed to load HTML document %s", html_path)
            raise ConversionError(f"Failed to load HTML document: {exc}") from exc

    # ------------------------------------------------------------------
    def _save(self, document: DocxDocument, output_path: str) -> None:
        try:
            document.save(str(output_path))
        except Exception as exc:
            self.logger.exception("Failed to save document to %s", output_path)
            raise ConversionError(f"Failed to save document: {exc}") from exc

    # ------------------------------------------------------------------
    def _isolated(self, step: str, func: Callable, *args) -> None:
        try:
            func(*args)
        except Exception:
            self.logger.exception("Error during %s", step)

    # ------------------------------------------------------------------
    def _cleanup(self, temp_dir: str) -> None:
        try:
            for path in Path(temp_dir).iterdir():
                path.unlink()
            Path(temp_dir).rmdir()
        except OSError as exc:
            self.logger.warning("Failed to clean up temporary files in %s: %s", temp_dir, exc)
