"""Composer input controller.

Ties the text buffer, attachment store, paste classifier and resize
scheduler together, decides when a submission is allowed, and exposes the
imperative operations a host uses to drive the composer.

Image preprocessing and text-file reads are asynchronous: each one runs in
its own task and lands in the store (or the buffer) whenever it finishes,
so completion order decides attachment order.  A result that arrives
after the store was cleared is dropped.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Coroutine, Iterable

from ..constants import PASTED_IMAGE_NAME
from ..log import logger
from .attachments import Attachment, AttachmentOrigin, AttachmentStore
from .buffer import Defer, InputSurface, TextBuffer
from .errors import ImagePreprocessError
from .files import FileKind, accepted_mime_types, file_kind, guess_mime_type, read_text_file
from .images import ImagePreprocessor, ImageSource, PillowPreprocessor
from .paste import PasteAction, PastePayload, classify_text, format_file_block, wrap_snippet
from .policy import ComposerSettings, ImagePolicy, RejectReason, Rejection, RejectionHandler
from .resize import ResizeScheduler, SetTimer, loop_timer

CallApp = Callable[[str, list[Attachment]], None]


@dataclass(frozen=True)
class SubmissionPayload:
    text: str
    attachments: tuple[Attachment, ...] = ()


@dataclass(frozen=True)
class PasteResult:
    """What the controller did with a paste event.

    ``default_prevented`` tells the host not to run its own paste
    insertion.  ``tasks`` are the image stagings still in flight.
    """

    default_prevented: bool = False
    wrapped: bool = False
    tasks: tuple[asyncio.Task, ...] = field(default_factory=tuple)


def call_soon(callback: Callable[[], None]) -> object:
    """Run *callback* on the next loop iteration (immediately without a loop)."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return None
    return loop.call_soon(callback)


class ComposerController:
    """State and policy behind a chat-message composer."""

    def __init__(
        self,
        surface: InputSurface,
        call_app: CallApp,
        *,
        settings: ComposerSettings | None = None,
        cancel_stream: Callable[[], None] | None = None,
        set_loading: Callable[[bool], None] | None = None,
        preprocessor: ImagePreprocessor | None = None,
        set_timer: SetTimer = loop_timer,
        defer: Defer = call_soon,
        on_reject: RejectionHandler | None = None,
        on_attachments_changed: Callable[[tuple[Attachment, ...]], None] | None = None,
        on_empty_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.settings = settings or ComposerSettings()
        self.surface = surface
        self._call_app = call_app
        self._cancel_stream = cancel_stream
        self._set_loading = set_loading
        self._preprocess = preprocessor or PillowPreprocessor()
        self._defer = defer
        self._on_reject = on_reject
        self._on_attachments_changed = on_attachments_changed

        self.loading = False
        self.store = AttachmentStore(self.settings.max_images)
        self.resizer = ResizeScheduler(
            set_timer,
            surface.content_rows,
            surface.set_visible_rows,
            max_rows=self.settings.max_rows,
            delay=self.settings.resize_delay,
        )
        self.buffer = TextBuffer(surface, self.resizer, defer, on_empty_change)
        self._tasks: set[asyncio.Task] = set()

    # -- state ----------------------------------------------------------------

    @property
    def policy(self) -> ImagePolicy:
        return self.settings.image_policy

    @property
    def attachments(self) -> tuple[Attachment, ...]:
        return self.store.snapshot()

    @property
    def is_empty(self) -> bool:
        return self.buffer.is_empty

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def accepted_mime_types(self) -> tuple[str, ...]:
        return accepted_mime_types(self.policy)

    def set_image_policy(self, policy: ImagePolicy) -> None:
        """Switch the image policy. Staged attachments stay as they are."""
        self.settings = replace(self.settings, image_policy=policy)

    # -- imperative control surface ------------------------------------------

    def clear_input_value(self) -> None:
        """Start fresh: empty the text and the attachment staging."""
        self._clear_attachments()
        self.buffer.clear()

    clear = clear_input_value

    def get_text_value(self) -> str:
        return self.buffer.read()

    def reset(self) -> None:
        """Clear text, attachments and undo history, then resize at once."""
        self._clear_attachments()
        self.buffer.clear()
        self.surface.clear_undo_history()
        self.resizer.resize_now()

    def resize_text_area(self) -> None:
        self.resizer.resize_now()

    def focus_textarea(self) -> None:
        self.surface.focus_input()

    def paste_text(self, text: str) -> None:
        """Insert *text* at the cursor as typed; never snippet-wrapped."""
        self.buffer.insert_at_cursor(text)

    def insert_at_cursor(self, text: str) -> None:
        self.buffer.insert_at_cursor(text)

    def set_content(self, text: str) -> None:
        self.buffer.set_content(text)

    def text_edited(self) -> None:
        """Host hook for ordinary edits (typing, default paste)."""
        self.buffer.text_edited()

    def remove_attachment(self, identity: int) -> bool:
        removed = self.store.remove(identity)
        if removed:
            self._attachments_changed()
        return removed

    # -- submission gate ------------------------------------------------------

    def handle_enter(self, shift: bool = False) -> bool:
        """Enter key press. Returns True when the key was consumed.

        Shift+Enter is left to the host (a literal newline).  While a
        submission is loading Enter is swallowed, not queued.
        """
        if shift:
            return False
        if self.loading:
            logger.debug("enter ignored while loading")
            return True
        self._submit()
        return True

    def submit(self) -> SubmissionPayload:
        """Explicit submit action; the caller has already checked loading."""
        payload = self._submit()
        self.resizer.collapse()
        return payload

    def cancel(self) -> None:
        """Stop the external stream. Text and attachments stay as they are."""
        if self._cancel_stream is not None:
            self._cancel_stream()
        self.loading = False
        if self._set_loading is not None:
            self._set_loading(False)

    def _submit(self) -> SubmissionPayload:
        text = self.buffer.commit()
        attachments = self.store.snapshot() if self.policy.sends_attachments else ()
        payload = SubmissionPayload(text, attachments)
        logger.debug(
            "submitting %d chars with %d attachment(s)", len(text), len(attachments)
        )
        self._call_app(payload.text, list(payload.attachments))
        return payload

    # -- paste ----------------------------------------------------------------

    def handle_paste(self, payload: PastePayload) -> PasteResult:
        """Route one paste event.

        Images are staged in the background.  The text part is classified
        on its own: large or multi-line text is framed with snippet
        markers, anything else is left to the host's default insertion.
        """
        prevented = False
        tasks: list[asyncio.Task] = []
        generation = self.store.generation

        for item in payload.items:
            if not item.is_image:
                continue
            if not self.policy.allows_staging:
                self._reject(RejectReason.IMAGES_DISABLED, item.name)
                continue
            if not item.data and item.path is None:
                logger.debug("skipping clipboard image %s without data", item.name)
                continue
            prevented = True
            source = ImageSource(
                name=item.name or PASTED_IMAGE_NAME, data=item.data, path=item.path
            )
            tasks.append(
                self._spawn(
                    self._stage_image(source, AttachmentOrigin.PASTED, generation)
                )
            )

        text = payload.text
        action = classify_text(text, self.settings.max_rows, self.settings.markers)
        if action is PasteAction.WRAP:
            self.buffer.insert_at_cursor(wrap_snippet(text, self.settings.markers))
            return PasteResult(True, True, tuple(tasks))
        if prevented and text:
            # The host will not insert it now that the default is prevented
            self.buffer.insert_at_cursor(text)
        return PasteResult(prevented, False, tuple(tasks))

    # -- file picker ----------------------------------------------------------

    def select_files(self, paths: Iterable[Path]) -> list[asyncio.Task]:
        """Stage images and inline text files chosen in the file picker."""
        tasks: list[asyncio.Task] = []
        generation = self.store.generation
        for path in paths:
            kind = file_kind(guess_mime_type(path))
            if kind is FileKind.IMAGE:
                if not self.policy.allows_staging:
                    self._reject(RejectReason.IMAGES_DISABLED, path.name)
                    continue
                if self.store.is_full:
                    self._reject(RejectReason.LIMIT_REACHED, path.name)
                    continue
                tasks.append(
                    self._spawn(
                        self._stage_image(
                            ImageSource.from_path(path),
                            AttachmentOrigin.FILE_SELECTED,
                            generation,
                        )
                    )
                )
            elif kind is FileKind.TEXT:
                tasks.append(self._spawn(self._inject_text_file(path, generation)))
            else:
                self._reject(RejectReason.UNSUPPORTED_TYPE, path.name)
        return tasks

    async def wait_pending(self) -> None:
        """Wait until every in-flight preprocessing and file read has landed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # -- async producers ------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _stage_image(
        self, source: ImageSource, origin: AttachmentOrigin, generation: int
    ) -> None:
        try:
            image = await self._preprocess(source)
        except ImagePreprocessError as exc:
            logger.warning("image preprocessing failed: %s", exc)
            self._reject(RejectReason.PREPROCESS_FAILED, source.name, exc.reason)
            return
        if generation != self.store.generation:
            self._reject(RejectReason.STALE, source.name)
            return
        attachment = self.store.append(
            image.encoded_data, image.mime_type, origin, source.name
        )
        if attachment is None:
            self._reject(RejectReason.LIMIT_REACHED, source.name)
            return
        if self.policy is ImagePolicy.WARN:
            logger.debug("image %s staged under the 'warn' policy", source.name)
        self._attachments_changed()

    async def _inject_text_file(self, path: Path, generation: int) -> None:
        try:
            content = await asyncio.to_thread(read_text_file, path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("File reading error: %s: %s", path, exc)
            self._reject(RejectReason.READ_FAILED, path.name, str(exc))
            return
        if generation != self.store.generation:
            self._reject(RejectReason.STALE, path.name)
            return
        self.buffer.insert_at_cursor(
            format_file_block(path.name, content, self.settings.markers)
        )
        self.surface.focus_input()
        self._defer(self._settle_at_end)

    def _settle_at_end(self) -> None:
        self.surface.place_cursor(len(self.buffer.live))
        self.resizer.resize_now()
        self.surface.scroll_to_bottom()

    # -- notifications --------------------------------------------------------

    def _clear_attachments(self) -> None:
        if self.store.clear():
            self._attachments_changed()

    def _attachments_changed(self) -> None:
        if self._on_attachments_changed is not None:
            self._on_attachments_changed(self.store.snapshot())

    def _reject(self, reason: RejectReason, name: str, detail: str = "") -> None:
        logger.debug("rejected %s (%s) %s", name, reason.value, detail)
        if self._on_reject is not None:
            self._on_reject(Rejection(reason, name, detail))
