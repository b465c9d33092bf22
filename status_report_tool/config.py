"""Runtime configuration for the converter.

Values come from the process environment (optionally seeded from a ``.env``
file). Nothing here is global: callers build a :class:`ConverterConfig` and
hand it to the services that need it.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

DEFAULT_LOG_PATH = "./logs/"
DEFAULT_LOG_LEVEL = "Information"
DEFAULT_LICENSE_PATH = "../StatusReportConverter.lic"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LicenseCapability:
    """Whether a licence file was found; absent means evaluation mode."""

    path: Optional[Path] = None
    is_licensed: bool = False

    @classmethod
    def load(cls, license_path: str, logger: Optional[logging.Logger] = None) -> "LicenseCapability":
        log = logger or LOGGER
        path = Path(license_path)
        if not path.is_absolute():
            path = BASE_DIR / path
        try:
            if path.is_file() and path.stat().st_size > 0:
                log.info("License loaded successfully from %s", path)
                return cls(path=path, is_licensed=True)
            log.warning("License file not found at %s. Running in evaluation mode.", path)
        except OSError:
            log.exception("Failed to load license from %s", path)
        return cls(path=path, is_licensed=False)


@dataclass
class ConverterConfig:
    log_level: str = DEFAULT_LOG_LEVEL
    log_path: str = DEFAULT_LOG_PATH
    license_path: str = DEFAULT_LICENSE_PATH
    template_path: Optional[str] = None
    # Relaxes the content-safety gate so inline chart initialisers survive validation
    allow_chart_scripts: bool = False
    # Clear a section's existing body before writing merged content
    replace_section_content: bool = True
    major_heading_page_breaks: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "ConverterConfig":
        load_dotenv(env_file)
        return cls(
            log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
            log_path=os.getenv("LOG_PATH", DEFAULT_LOG_PATH),
            license_path=os.getenv("LICENSE_PATH", DEFAULT_LICENSE_PATH),
            template_path=os.getenv("TEMPLATE_PATH") or None,
            allow_chart_scripts=_env_flag("ALLOW_CHART_SCRIPTS", False),
            replace_section_content=_env_flag("REPLACE_SECTION_CONTENT", True),
            major_heading_page_breaks=_env_flag("MAJOR_HEADING_PAGE_BREAKS", False),
        )
