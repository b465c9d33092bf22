"""Tests for HTML cleanup before extraction and rendering."""
from pathlib import Path

from status_report_tool.html_preprocessor import clean_style, clean_text, normalize_soup, parse_html, preprocess_file


def test_clean_text_removes_invisible_characters():
    assert clean_text("a\u200bb\u00a0c\u2003 d\ufeff") == "ab c d"


def test_clean_style_only_touches_problem_declarations():
    assert clean_style("color: red") == "color: red"
    assert clean_style("writing-mode: vertical-rl; color: red") == "color: red"
    assert clean_style("transform: rotate(90deg);") == ""
    assert clean_style("transform: scale(2)") == "transform: scale(2)"


def test_normalize_soup():
    soup = parse_html(
        "<html><body dir='rtl'><script>alert(1)</script>"
        "<p dir='rtl' style='text-orientation: upright'>Hello\u200b\u00a0world</p>"
        "<pre>keep  spacing</pre></body></html>"
    )
    normalize_soup(soup)

    assert soup.find("script") is None
    paragraph = soup.find("p")
    assert paragraph.get_text() == "Hello world"
    assert paragraph.get("dir") is None
    assert paragraph.get("style") is None
    assert soup.body["dir"] == "ltr"
    assert soup.find("pre").get_text() == "keep  spacing"


def test_preprocess_file_writes_cleaned_copy(tmp_path, sample_html_file):
    out_dir = tmp_path / "tmp"
    out_dir.mkdir()
    cleaned = preprocess_file(str(sample_html_file), temp_dir=str(out_dir))

    assert Path(cleaned) == out_dir / "cleaned_report.html"
    assert "Current Week Accomplishments" in Path(cleaned).read_text(encoding="utf-8")


def test_preprocess_file_falls_back_to_original(tmp_path):
    missing = str(tmp_path / "missing.html")
    assert preprocess_file(missing, temp_dir=str(tmp_path)) == missing
