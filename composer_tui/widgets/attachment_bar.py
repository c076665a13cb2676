"""Attachment strip shown above the composer."""

from __future__ import annotations

from textual.widgets import Static

from ..core import Attachment


class AttachmentBar(Static):
    """Thin bar listing the images staged for the next message."""

    DEFAULT_CSS = """
    AttachmentBar {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(self) -> None:
        super().__init__("", id="attachment-bar", markup=False)
        self._attachments: tuple[Attachment, ...] = ()

    @property
    def attachments(self) -> tuple[Attachment, ...]:
        return self._attachments

    def set_attachments(self, attachments: tuple[Attachment, ...]) -> None:
        self._attachments = attachments
        self._render_bar()

    def _render_bar(self) -> None:
        if not self._attachments:
            self.display = False
            self.update("")
            return
        self.display = True
        chips = "  ".join(f"[{a.identity}] {a.display_name}" for a in self._attachments)
        self.update(f"\U0001f4ce {chips}")
