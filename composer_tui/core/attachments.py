"""Staged attachments for the next outgoing message."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from ..log import logger


class AttachmentOrigin(str, Enum):
    PASTED = "pasted"
    FILE_SELECTED = "file-selected"


@dataclass(frozen=True)
class Attachment:
    """An image staged for the next message."""

    identity: int
    encoded_data: str  # data: URL
    mime_type: str
    origin: AttachmentOrigin
    display_name: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class AttachmentStore:
    """Ordered attachment list (insertion order is display order).

    Identities come from a counter owned by the store and are never
    reused, so removal by identity stays unambiguous while appends and
    removals interleave.  ``generation`` moves on every :meth:`clear`;
    producers that finish after a clear compare it and drop their result.
    """

    def __init__(self, max_images: int) -> None:
        self.max_images = max_images
        self._items: list[Attachment] = []
        self._ids = itertools.count(1)
        self._generation = 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Attachment]:
        return iter(self._items)

    def __contains__(self, identity: object) -> bool:
        return any(item.identity == identity for item in self._items)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def image_count(self) -> int:
        return sum(1 for item in self._items if item.is_image)

    @property
    def is_full(self) -> bool:
        return self.image_count >= self.max_images

    def snapshot(self) -> tuple[Attachment, ...]:
        return tuple(self._items)

    def append(
        self,
        encoded_data: str,
        mime_type: str,
        origin: AttachmentOrigin,
        display_name: str,
    ) -> Attachment | None:
        """Stage a new attachment.

        Returns ``None`` (and stages nothing) when an image would exceed
        ``max_images``.
        """
        if mime_type.startswith("image/") and self.is_full:
            logger.debug(
                "attachment cap (%d) reached, dropping %s", self.max_images, display_name
            )
            return None
        attachment = Attachment(
            identity=next(self._ids),
            encoded_data=encoded_data,
            mime_type=mime_type,
            origin=origin,
            display_name=display_name,
        )
        self._items.append(attachment)
        return attachment

    def remove(self, identity: int) -> bool:
        """Remove the attachment with *identity*. Returns False if absent."""
        for index, item in enumerate(self._items):
            if item.identity == identity:
                del self._items[index]
                return True
        return False

    def clear(self) -> int:
        """Drop everything and start a new generation. Returns the count cleared."""
        count = len(self._items)
        self._items = []
        self._generation += 1
        return count
