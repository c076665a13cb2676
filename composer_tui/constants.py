"""Module-level constants for composer-tui."""

from __future__ import annotations

from pathlib import Path
from typing import NamedTuple


class SnippetMarkers(NamedTuple):
    """Sentinel lines framing a preformatted block of pasted text."""

    begin: str
    end: str


SNIPPET_MARKERS = SnippetMarkers("----BEGIN-SNIPPET----", "----END-SNIPPET----")

# Input rows shown before the composer scrolls internally
MAX_ROWS = 20

# Rough characters-per-row estimate for the "large paste" heuristic
CHARS_PER_ROW = 80

MAX_IMAGE_ATTACHMENTS_PER_MESSAGE = 10

# Quiet period before the input height is recomputed
RESIZE_DEBOUNCE_SECONDS = 0.1

# Longest side of a preprocessed image, in pixels
MAX_IMAGE_DIMENSION = 2048

PASTED_IMAGE_NAME = "pasted-image"

IMAGE_MIME_TYPES: tuple[str, ...] = (
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
)

TEXT_MIME_TYPES: tuple[str, ...] = (
    "text/plain",
    "text/markdown",
    "text/csv",
    "text/html",
    "text/css",
    "text/javascript",
    "text/x-python",
    "text/x-c",
    "text/x-java-source",
    "text/x-sh",
    "text/xml",
    "text/yaml",
    "application/json",
    "application/xml",
    "application/x-yaml",
    "application/x-sh",
    "application/javascript",
    "application/sql",
    "application/toml",
)

COMPOSER_HOME = Path.home() / ".composer-tui"
