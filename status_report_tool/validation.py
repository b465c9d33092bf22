"""Path and content checks performed before any document work starts."""
from __future__ import annotations

import html
import re
from pathlib import Path

from .constants import HTML_EXTENSIONS
from .exceptions import ValidationError

UNSAFE_CONTENT_RE = re.compile(
    r"<script[^>]*>.*?</script>|<iframe[^>]*>.*?</iframe>",
    re.IGNORECASE | re.DOTALL,
)
# Used when inline chart scripts are allowed: iframes and externally sourced scripts only
UNSAFE_EMBED_RE = re.compile(
    r"<script[^>]*\bsrc\s*=[^>]*>|<iframe[^>]*>.*?</iframe>",
    re.IGNORECASE | re.DOTALL,
)
PATH_TRAVERSAL_RE = re.compile(r"\.\.[\\/]")
TAG_RE = re.compile(r"<[^>]*>")


def _check_traversal(file_path: str, message: str) -> None:
    if PATH_TRAVERSAL_RE.search(file_path):
        raise ValidationError(message)


def validate_html_file(file_path: str, *, allow_scripts: bool = False) -> Path:
    """Return the input path when it is a readable, safe HTML file.

    Path checks run before the filesystem is touched, so traversal attempts
    are rejected without any I/O.
    """
    if not file_path or not str(file_path).strip():
        raise ValidationError("File path cannot be empty")
    file_path = str(file_path)
    _check_traversal(file_path, "Invalid file path detected")

    path = Path(file_path)
    if not path.is_file():
        raise ValidationError("File does not exist")
    if path.suffix.lower() not in HTML_EXTENSIONS:
        raise ValidationError("File must be an HTML file")

    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ValidationError(f"Error reading file: {exc}") from exc

    pattern = UNSAFE_EMBED_RE if allow_scripts else UNSAFE_CONTENT_RE
    if pattern.search(content):
        raise ValidationError("HTML file contains potentially unsafe content")
    return path


def validate_output_path(file_path: str) -> Path:
    """Return the output path, creating its directory when missing."""
    if not file_path or not str(file_path).strip():
        raise ValidationError("Output path cannot be empty")
    file_path = str(file_path)
    _check_traversal(file_path, "Invalid output path detected")

    path = Path(file_path)
    directory = path.parent
    if str(directory) and not directory.exists():
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ValidationError(f"Cannot create output directory: {exc}") from exc
    return path


def sanitize_text(value: str) -> str:
    if not value or not value.strip():
        return ""
    stripped = TAG_RE.sub("", value)
    return html.escape(stripped, quote=True).replace("&#x27;", "&#39;").strip()
