"""Command-line entry point: ``python -m status_report_tool INPUT OUTPUT``."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import ConverterConfig
from .constants import APPLICATION_TITLE, StatusMessages
from .converter import ConversionService
from .exceptions import ValidationError
from .html_extractor import HtmlContentExtractor
from .logging_setup import configure_logging
from .models import StatusReport


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="status_report_tool", description=APPLICATION_TITLE)
    parser.add_argument("input", help="HTML status report (.html or .htm)")
    parser.add_argument("output", help="Word document to write (.docx)")
    parser.add_argument("--template", default=None, help="Optional .docx template to render into")
    parser.add_argument(
        "--allow-chart-scripts",
        action="store_true",
        help="Accept inline <script> blocks so chart data can be extracted",
    )
    parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Append merged content after existing section content instead of replacing it",
    )
    parser.add_argument("--log-level", default=None, help="Verbose, Debug, Information, Warning, Error or Fatal")
    parser.add_argument("--env-file", default=None, help="Read settings from this .env file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = ConverterConfig.from_env(args.env_file)
    if args.template:
        config.template_path = args.template
    if args.allow_chart_scripts:
        config.allow_chart_scripts = True
    if args.keep_existing:
        config.replace_section_content = False
    if args.log_level:
        config.log_level = args.log_level

    logger = configure_logging(config)
    service = ConversionService(config, logger)
    if not service.is_licensed():
        print(StatusMessages.EVALUATION_MODE)

    try:
        service.validate(StatusReport(input_path=args.input, output_path=args.output))
    except ValidationError as exc:
        logger.error("Validation failed: %s", exc)
        print(str(exc), file=sys.stderr)
        return 1

    try:
        report = HtmlContentExtractor(logger).extract_report(args.input)
        report.output_path = args.output
        print(
            f"Current week: {len(report.current_week_status.splitlines())} lines, "
            f"next week: {len(report.next_week_goals.splitlines())} lines, "
            f"risks: {len(report.risks)}"
        )
        print(StatusMessages.CONVERTING)
        result = service.convert(report)
    except Exception as exc:
        logging.getLogger(__name__).exception("Fatal error")
        print(f"{StatusMessages.FAILED} {exc}", file=sys.stderr)
        return 1

    print(result.message)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
