"""Paste classification and snippet framing.

Every function in this module is stateless: it takes explicit parameters
and returns a value.  The controller decides what to do with the result.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from urllib.parse import unquote

from ..constants import CHARS_PER_ROW, PASTED_IMAGE_NAME, SnippetMarkers


class PasteAction(Enum):
    DEFAULT = "default"  # let the host surface insert the text as-is
    WRAP = "wrap"  # insert the text framed by snippet markers


@dataclass(frozen=True)
class ClipboardItem:
    """One non-text entry of a paste event."""

    mime_type: str
    data: bytes | None = None
    path: Path | None = None  # dropped file, read lazily
    name: str = PASTED_IMAGE_NAME

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass(frozen=True)
class PastePayload:
    """Everything a single paste event carries."""

    text: str = ""
    items: tuple[ClipboardItem, ...] = field(default_factory=tuple)


def contains_marker(text: str, markers: SnippetMarkers) -> bool:
    return markers.begin in text or markers.end in text


def is_large_paste(text: str, max_rows: int) -> bool:
    """Heuristic for "looks like a code block or a big blob"."""
    return text.count("\n") >= max_rows or len(text) > CHARS_PER_ROW * max_rows


def classify_text(text: str, max_rows: int, markers: SnippetMarkers) -> PasteAction:
    """Decide how the plain-text part of a paste is inserted.

    Text that already carries a marker is never wrapped again.
    """
    if contains_marker(text, markers):
        return PasteAction.DEFAULT
    if is_large_paste(text, max_rows):
        return PasteAction.WRAP
    return PasteAction.DEFAULT


def wrap_snippet(text: str, markers: SnippetMarkers) -> str:
    return f"{markers.begin}\n{text}\n{markers.end}\n"


def format_file_block(name: str, content: str, markers: SnippetMarkers) -> str:
    """Inline block used when a text file is attached."""
    return f"File: {name}:\n{markers.begin}\n{content}\n{markers.end}\n"


# -- Terminal drag-and-drop ---------------------------------------------------


def _clean_path_line(line: str) -> str:
    line = line.strip().strip("'\"")
    if line.startswith("file://"):
        line = unquote(line[len("file://") :])
    # Shells escape spaces when a file is dropped onto the terminal
    return line.replace("\\ ", " ")


def pasted_image_paths(text: str) -> list[Path]:
    """Return image paths when *text* is nothing but dropped image files.

    Terminals turn a drag-and-drop into a paste of the file path(s).  Only
    when every non-empty line names an existing image file is the paste
    treated as an image drop; anything else stays text.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []
    paths: list[Path] = []
    for line in lines:
        try:
            path = Path(_clean_path_line(line)).expanduser()
            if not path.is_file():
                return []
        except (OSError, ValueError):
            return []
        mime, _ = mimetypes.guess_type(path.name)
        if not mime or not mime.startswith("image/"):
            return []
        paths.append(path)
    return paths
