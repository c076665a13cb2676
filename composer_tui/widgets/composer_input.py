"""Composer input widget for composer-tui."""

from __future__ import annotations

import io
import mimetypes

from PIL import Image, ImageGrab
from textual import events
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import TextArea

from ..core import (
    Attachment,
    ClipboardItem,
    ComposerController,
    ComposerSettings,
    ImagePreprocessor,
    PastePayload,
    Rejection,
)
from ..core.paste import pasted_image_paths
from ..log import logger


def grab_clipboard_image() -> bytes | None:
    """Return the system clipboard image as PNG bytes, if there is one."""
    try:
        image = ImageGrab.grabclipboard()
    except (OSError, NotImplementedError):
        logger.debug("clipboard image grab unavailable", exc_info=True)
        return None
    # File lists come through the paste text instead
    if not isinstance(image, Image.Image):
        return None
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


class ComposerInput(TextArea):
    """Chat composer with snippet-aware paste and attachment staging.

    Enter submits, Shift+Enter / Ctrl+J insert a newline.  Large pastes
    are framed with snippet markers; image files dropped onto the terminal
    (which arrive as a paste of their paths) become attachments.

    All state lives in :attr:`controller`; this widget is its
    ``InputSurface`` and turns its callbacks into messages.
    """

    DEFAULT_CSS = """
    ComposerInput {
        height: 3;
        border: round $primary 50%;
    }
    ComposerInput:focus {
        border: round $primary;
    }
    """

    # Driven by the host while a response is streaming
    busy: reactive[bool] = reactive(False)

    class Submitted(Message):
        """Enter or the send button produced a message."""

        def __init__(
            self, composer: ComposerInput, text: str, attachments: list[Attachment]
        ) -> None:
            super().__init__()
            self.composer = composer
            self.text = text
            self.attachments = attachments

        @property
        def control(self) -> ComposerInput:
            return self.composer

    class CancelRequested(Message):
        """The user asked to stop the running response."""

    class AttachmentsChanged(Message):
        def __init__(self, attachments: tuple[Attachment, ...]) -> None:
            super().__init__()
            self.attachments = attachments

    class EmptyChanged(Message):
        def __init__(self, empty: bool) -> None:
            super().__init__()
            self.empty = empty

    class Rejected(Message):
        """A pasted or selected item was dropped."""

        def __init__(self, rejection: Rejection) -> None:
            super().__init__()
            self.rejection = rejection

    def __init__(
        self,
        text: str = "",
        *,
        settings: ComposerSettings | None = None,
        preprocessor: ImagePreprocessor | None = None,
        clipboard_images: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(text, **kwargs)
        self.clipboard_images = clipboard_images
        self.controller = ComposerController(
            self,
            self._post_submitted,
            settings=settings,
            cancel_stream=lambda: self.post_message(self.CancelRequested()),
            set_loading=self._set_busy,
            preprocessor=preprocessor,
            set_timer=self.set_timer,
            defer=self.call_after_refresh,
            on_reject=lambda rejection: self.post_message(self.Rejected(rejection)),
            on_attachments_changed=lambda items: self.post_message(
                self.AttachmentsChanged(items)
            ),
            on_empty_change=lambda empty: self.post_message(self.EmptyChanged(empty)),
        )

    # -- InputSurface ---------------------------------------------------------

    def current_text(self) -> str:
        return self.text

    def selected_range(self) -> tuple[int, int]:
        start = self.document.get_index_from_location(self.selection.start)  # type: ignore[attr-defined]
        end = self.document.get_index_from_location(self.selection.end)  # type: ignore[attr-defined]
        return min(start, end), max(start, end)

    def splice(self, start: int, end: int, text: str) -> None:
        self.replace(
            text,
            self.document.get_location_from_index(start),  # type: ignore[attr-defined]
            self.document.get_location_from_index(end),  # type: ignore[attr-defined]
        )

    def place_cursor(self, offset: int) -> None:
        offset = max(0, min(offset, len(self.text)))
        self.move_cursor(self.document.get_location_from_index(offset))  # type: ignore[attr-defined]

    def scroll_to_bottom(self) -> None:
        self.scroll_end(animate=False)

    def is_overflowing(self) -> bool:
        return self.max_scroll_y > 0

    def content_rows(self) -> int:
        return self.wrapped_document.height

    def set_visible_rows(self, rows: int) -> None:
        self.styles.height = rows + self.styles.gutter.height

    def focus_input(self) -> None:
        self.focus()

    def clear_undo_history(self) -> None:
        self.history.clear()

    # -- controller callbacks -------------------------------------------------

    def _post_submitted(self, text: str, attachments: list[Attachment]) -> None:
        self.post_message(self.Submitted(self, text, attachments))

    def _set_busy(self, busy: bool) -> None:
        self.busy = busy

    def watch_busy(self, busy: bool) -> None:
        self.controller.loading = busy

    # -- events ---------------------------------------------------------------

    def _on_text_area_changed(self) -> None:
        self.controller.text_edited()

    async def _on_key(self, event: events.Key) -> None:
        if event.key == "enter":
            event.prevent_default()
            event.stop()
            self.controller.handle_enter()
            return
        if event.key in ("shift+enter", "ctrl+j"):
            # Some terminals report Shift+Enter as Ctrl+J
            event.prevent_default()
            event.stop()
            self.controller.handle_enter(shift=True)
            self.insert("\n")
            return
        await super()._on_key(event)

    async def _on_paste(self, event: events.Paste) -> None:
        if self.read_only:
            return
        result = self.controller.handle_paste(self._paste_payload(event.text))
        if result.default_prevented:
            event.prevent_default()
            event.stop()
        # Otherwise TextArea._on_paste inserts the text after this handler

    def _paste_payload(self, text: str) -> PastePayload:
        items: list[ClipboardItem] = []
        if self.clipboard_images:
            data = grab_clipboard_image()
            if data is not None:
                items.append(ClipboardItem("image/png", data=data))
        paths = pasted_image_paths(text)
        if paths:
            for path in paths:
                mime, _ = mimetypes.guess_type(path.name)
                items.append(
                    ClipboardItem(mime or "image/png", path=path, name=path.name)
                )
            return PastePayload("", tuple(items))
        return PastePayload(text, tuple(items))
