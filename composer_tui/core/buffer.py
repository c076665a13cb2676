"""Text buffer controller: live/committed text and cursor-relative edits."""

from __future__ import annotations

from typing import Callable, Protocol

from .resize import ResizeScheduler

Defer = Callable[[Callable[[], None]], object]


class InputSurface(Protocol):
    """The host text-editing widget the buffer drives.

    Offsets are character indexes into :meth:`current_text`.
    """

    def current_text(self) -> str: ...

    def selected_range(self) -> tuple[int, int]: ...

    def splice(self, start: int, end: int, text: str) -> None: ...

    def place_cursor(self, offset: int) -> None: ...

    def scroll_to_bottom(self) -> None: ...

    def is_overflowing(self) -> bool: ...

    def content_rows(self) -> int: ...

    def set_visible_rows(self, rows: int) -> None: ...

    def focus_input(self) -> None: ...

    def clear_undo_history(self) -> None: ...


class HeadlessSurface:
    """In-memory :class:`InputSurface` with no wrapping.

    Used for scripted composition and tests; one line of text is one row.
    """

    def __init__(self, text: str = "", visible_rows: int = 1) -> None:
        self.text = text
        self.selection = (len(text), len(text))
        self.visible_rows = visible_rows
        self.focused = False
        self.scrolled_to_bottom = False
        self.undo_history_cleared = 0

    def current_text(self) -> str:
        return self.text

    def selected_range(self) -> tuple[int, int]:
        start, end = self.selection
        return min(start, end), max(start, end)

    def select(self, start: int, end: int | None = None) -> None:
        self.selection = (start, start if end is None else end)

    def type(self, text: str) -> None:
        """Simulate keyboard input at the selection."""
        start, end = self.selected_range()
        self.splice(start, end, text)
        self.selection = (start + len(text), start + len(text))

    def splice(self, start: int, end: int, text: str) -> None:
        self.text = self.text[:start] + text + self.text[end:]
        self.scrolled_to_bottom = False

    def place_cursor(self, offset: int) -> None:
        offset = max(0, min(offset, len(self.text)))
        self.selection = (offset, offset)

    def scroll_to_bottom(self) -> None:
        self.scrolled_to_bottom = True

    def is_overflowing(self) -> bool:
        return self.content_rows() > self.visible_rows

    def content_rows(self) -> int:
        return self.text.count("\n") + 1

    def set_visible_rows(self, rows: int) -> None:
        self.visible_rows = rows

    def focus_input(self) -> None:
        self.focused = True

    def clear_undo_history(self) -> None:
        self.undo_history_cleared += 1


class TextBuffer:
    """Owns the committed text value and edits the live one.

    The *live* value is whatever the surface shows right now; the
    *committed* value is what :meth:`read` returns.  They can differ
    between an ordinary keystroke and the next commit point (an insertion
    through this class, a submit, or a reset).
    """

    def __init__(
        self,
        surface: InputSurface,
        resizer: ResizeScheduler,
        defer: Defer,
        on_empty_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.surface = surface
        self.resizer = resizer
        self._defer = defer
        self._on_empty_change = on_empty_change
        self.committed = ""
        self._empty = not surface.current_text().strip()

    # -- reads ----------------------------------------------------------------

    @property
    def live(self) -> str:
        return self.surface.current_text()

    @property
    def is_empty(self) -> bool:
        return not self.live.strip()

    def read(self) -> str:
        return self.committed

    # -- commit points --------------------------------------------------------

    def commit(self) -> str:
        """Copy the live value into the committed value."""
        self.committed = self.live
        return self.committed

    def insert_at_cursor(self, text: str) -> None:
        """Replace the selection with *text* and commit the result."""
        start, end = self.surface.selected_range()
        live = self.live
        self.committed = live[:start] + text + live[end:]
        self.surface.splice(start, end, text)
        self._after_mutation()
        self._defer_cursor(start + len(text))

    def set_content(self, text: str) -> None:
        """Replace the whole buffer."""
        self.committed = text
        self.surface.splice(0, len(self.live), text)
        self._after_mutation()
        self._defer_cursor(len(text))

    def clear(self) -> None:
        self.set_content("")

    # -- ordinary edits -------------------------------------------------------

    def text_edited(self) -> None:
        """The host changed the live value (typing, default paste)."""
        self._after_mutation()
        if self.surface.is_overflowing():
            self.surface.scroll_to_bottom()

    # -- internals ------------------------------------------------------------

    def _after_mutation(self) -> None:
        empty = not self.live.strip()
        if empty != self._empty:
            self._empty = empty
            if self._on_empty_change is not None:
                self._on_empty_change(empty)
        self.resizer.schedule()

    def _defer_cursor(self, offset: int) -> None:
        # Runs after the host has reflowed the new content
        def place() -> None:
            self.surface.place_cursor(offset)
            if self.surface.is_overflowing():
                self.surface.scroll_to_bottom()

        self._defer(place)
