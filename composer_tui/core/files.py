"""File-type dispatch for attachments chosen in the file picker."""

from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import Path

from ..constants import IMAGE_MIME_TYPES, TEXT_MIME_TYPES
from .policy import ImagePolicy

# Source files the platform MIME table misses or maps to something else
# (.ts is MPEG transport stream, .rs an XML type on some systems)
_TEXT_SUFFIXES = frozenset(
    {".md", ".rst", ".toml", ".ini", ".cfg", ".log", ".ts", ".tsx", ".rs", ".go"}
)


class FileKind(Enum):
    IMAGE = "image"
    TEXT = "text"
    UNSUPPORTED = "unsupported"


def guess_mime_type(path: Path) -> str:
    if path.suffix.lower() in _TEXT_SUFFIXES:
        return "text/plain"
    mime, _ = mimetypes.guess_type(path.name)
    if mime:
        return mime
    return "application/octet-stream"


def file_kind(mime_type: str) -> FileKind:
    if mime_type.startswith("image/"):
        return FileKind.IMAGE
    if mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES:
        return FileKind.TEXT
    return FileKind.UNSUPPORTED


def accepted_mime_types(policy: ImagePolicy) -> tuple[str, ...]:
    """MIME types the file picker offers; images only when staging is allowed."""
    images = IMAGE_MIME_TYPES if policy.allows_staging else ()
    return images + TEXT_MIME_TYPES


def is_accepted(path: Path, policy: ImagePolicy) -> bool:
    """Picker filter: does *path* belong to the accepted set?"""
    mime_type = guess_mime_type(path)
    if file_kind(mime_type) is FileKind.TEXT:
        return True
    return mime_type in accepted_mime_types(policy)


def read_text_file(path: Path) -> str:
    """Read the full content of a text attachment.

    Raises ``OSError`` or ``UnicodeDecodeError``; callers log and skip.
    """
    return path.read_text(encoding="utf-8")
