"""Attachment policy, composer settings and rejection reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..constants import (
    MAX_IMAGE_ATTACHMENTS_PER_MESSAGE,
    MAX_ROWS,
    RESIZE_DEBOUNCE_SECONDS,
    SNIPPET_MARKERS,
    SnippetMarkers,
)


class ImagePolicy(str, Enum):
    """Whether images may be staged and sent.

    ``WARN`` stages images like ``YES`` but leaves them out of the
    submitted payload; the user-facing warning is not implemented yet.
    """

    YES = "yes"
    WARN = "warn"
    NO = "no"

    @classmethod
    def parse(cls, value: object) -> ImagePolicy:
        """Accept enum values, strings and YAML 1.1 booleans."""
        if isinstance(value, cls):
            return value
        if value is True:
            return cls.YES
        if value is False:
            return cls.NO
        return cls(str(value).strip().lower())

    @property
    def allows_staging(self) -> bool:
        return self is not ImagePolicy.NO

    @property
    def sends_attachments(self) -> bool:
        return self is ImagePolicy.YES


@dataclass(frozen=True)
class ComposerSettings:
    """Everything the composer core reads from configuration."""

    image_policy: ImagePolicy = ImagePolicy.YES
    max_rows: int = MAX_ROWS
    max_images: int = MAX_IMAGE_ATTACHMENTS_PER_MESSAGE
    resize_delay: float = RESIZE_DEBOUNCE_SECONDS
    markers: SnippetMarkers = SNIPPET_MARKERS


class RejectReason(str, Enum):
    IMAGES_DISABLED = "images-disabled"
    LIMIT_REACHED = "limit-reached"
    UNSUPPORTED_TYPE = "unsupported-type"
    READ_FAILED = "read-failed"
    PREPROCESS_FAILED = "preprocess-failed"
    STALE = "stale"


@dataclass(frozen=True)
class Rejection:
    """A paste item or selected file that was dropped."""

    reason: RejectReason
    name: str
    detail: str = ""


RejectionHandler = Callable[[Rejection], None]
