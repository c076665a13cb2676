"""Tests for composer_tui.core.paste -- classification and snippet framing."""

from __future__ import annotations

from pathlib import Path

from composer_tui.constants import SNIPPET_MARKERS, SnippetMarkers
from composer_tui.core.paste import (
    ClipboardItem,
    PasteAction,
    classify_text,
    contains_marker,
    format_file_block,
    is_large_paste,
    pasted_image_paths,
    wrap_snippet,
)

BEGIN, END = SNIPPET_MARKERS


class TestLargePasteHeuristic:
    """A paste is large by row count or by character count."""

    def test_short_text_is_small(self):
        assert is_large_paste("hello", 20) is False

    def test_newlines_below_max_rows(self):
        assert is_large_paste("x\n" * 19, 20) is False

    def test_newlines_at_max_rows(self):
        assert is_large_paste("x\n" * 20, 20) is True

    def test_length_at_limit_is_small(self):
        assert is_large_paste("a" * 1600, 20) is False

    def test_length_over_limit_is_large(self):
        assert is_large_paste("a" * 1601, 20) is True

    def test_limit_follows_max_rows(self):
        assert is_large_paste("a" * 81, 1) is True
        assert is_large_paste("\n", 1) is True


class TestClassifyText:
    def test_small_text_uses_default(self):
        assert classify_text("hi there", 20, SNIPPET_MARKERS) is PasteAction.DEFAULT

    def test_long_single_line_wraps(self):
        assert classify_text("a" * 10_000, 20, SNIPPET_MARKERS) is PasteAction.WRAP

    def test_many_lines_wrap(self):
        text = "\n".join(f"line {i}" for i in range(25))
        assert classify_text(text, 20, SNIPPET_MARKERS) is PasteAction.WRAP

    def test_begin_marker_never_rewrapped(self):
        text = f"{BEGIN}\n" + "a" * 5000
        assert classify_text(text, 20, SNIPPET_MARKERS) is PasteAction.DEFAULT

    def test_end_marker_never_rewrapped(self):
        text = "x\n" * 40 + END
        assert classify_text(text, 20, SNIPPET_MARKERS) is PasteAction.DEFAULT

    def test_empty_text_is_default(self):
        assert classify_text("", 20, SNIPPET_MARKERS) is PasteAction.DEFAULT

    def test_custom_markers(self):
        markers = SnippetMarkers("<<<", ">>>")
        assert contains_marker("a <<< b", markers) is True
        assert contains_marker(BEGIN, markers) is False


class TestFraming:
    def test_wrap_snippet_layout(self):
        assert wrap_snippet("body", SNIPPET_MARKERS) == f"{BEGIN}\nbody\n{END}\n"

    def test_wrapped_text_contains_each_marker_once(self):
        wrapped = wrap_snippet("a" * 3000, SNIPPET_MARKERS)
        assert wrapped.count(BEGIN) == 1
        assert wrapped.count(END) == 1
        assert wrapped.index(BEGIN) < wrapped.index("a") < wrapped.index(END)

    def test_file_block_layout(self):
        block = format_file_block("notes.txt", "abc", SNIPPET_MARKERS)
        assert block == f"File: notes.txt:\n{BEGIN}\nabc\n{END}\n"


class TestClipboardItem:
    def test_image_item(self):
        assert ClipboardItem("image/png", data=b"x").is_image is True

    def test_non_image_item(self):
        assert ClipboardItem("text/uri-list").is_image is False

    def test_default_name(self):
        assert ClipboardItem("image/png").name == "pasted-image"


class TestDroppedImagePaths:
    """Terminal drag-and-drop arrives as pasted file paths."""

    def test_single_image_path(self, png_file: Path):
        assert pasted_image_paths(str(png_file)) == [png_file]

    def test_quoted_path(self, png_file: Path):
        assert pasted_image_paths(f"'{png_file}'") == [png_file]

    def test_file_url(self, tmp_path: Path, png_bytes: bytes):
        path = tmp_path / "my shot.png"
        path.write_bytes(png_bytes)
        url = "file://" + str(path).replace(" ", "%20")
        assert pasted_image_paths(url) == [path]

    def test_escaped_spaces(self, tmp_path: Path, png_bytes: bytes):
        path = tmp_path / "my shot.png"
        path.write_bytes(png_bytes)
        assert pasted_image_paths(str(path).replace(" ", "\\ ")) == [path]

    def test_multiple_lines(self, tmp_path: Path, png_bytes: bytes):
        first = tmp_path / "a.png"
        second = tmp_path / "b.png"
        first.write_bytes(png_bytes)
        second.write_bytes(png_bytes)
        assert pasted_image_paths(f"{first}\n{second}\n") == [first, second]

    def test_missing_file_is_text(self, tmp_path: Path):
        assert pasted_image_paths(str(tmp_path / "nope.png")) == []

    def test_non_image_file_is_text(self, text_file: Path):
        assert pasted_image_paths(str(text_file)) == []

    def test_mixed_lines_are_text(self, png_file: Path):
        assert pasted_image_paths(f"look at this\n{png_file}") == []

    def test_plain_prose_is_text(self):
        assert pasted_image_paths("hello world") == []

    def test_blank_is_text(self):
        assert pasted_image_paths("   \n") == []
