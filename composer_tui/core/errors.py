"""Exception types raised by the composer core."""

from __future__ import annotations


class ComposerError(Exception):
    """Base class for composer failures."""


class ImagePreprocessError(ComposerError):
    """An image could not be decoded or re-encoded."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason
