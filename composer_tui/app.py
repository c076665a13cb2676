"""Demo host application for the composer."""

from __future__ import annotations

from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.timer import Timer
from textual.widgets import Button, Footer, Static

from .core import (
    ComposerSettings,
    ImagePolicy,
    ImagePreprocessor,
    RejectReason,
    Rejection,
)
from .log import logger
from .preferences import Preferences, load_preferences, save_image_policy
from .widgets import AttachmentBar, ComposerInput, FilePickerScreen

# Simulated response length
STREAM_SECONDS = 1.5

_REJECTION_TEXT = {
    RejectReason.IMAGES_DISABLED: "Image attachments are disabled",
    RejectReason.LIMIT_REACHED: "Attachment limit reached",
    RejectReason.UNSUPPORTED_TYPE: "Unsupported file type",
    RejectReason.READ_FAILED: "Could not read file",
    RejectReason.PREPROCESS_FAILED: "Could not process image",
    RejectReason.STALE: "Attachment discarded after reset",
}


def describe_rejection(rejection: Rejection) -> str:
    text = f"{_REJECTION_TEXT[rejection.reason]}: {rejection.name}"
    if rejection.detail:
        text += f" ({rejection.detail})"
    return text


class ComposerApp(App):
    """Minimal chat screen wrapped around :class:`ComposerInput`.

    Sent messages are echoed into the transcript, then a timer stands in
    for the response stream so the busy state and cancel can be exercised.
    """

    TITLE = "composer-tui"

    CSS = """
    #transcript {
        height: 1fr;
        padding: 0 1;
    }
    .message {
        margin: 0 0 1 0;
    }
    .reply {
        color: $text-muted;
    }
    #input-row {
        height: auto;
    }
    #composer {
        width: 1fr;
    }
    #send-btn {
        width: 10;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("ctrl+o", "attach_files", "Attach", show=True),
        Binding("ctrl+t", "remove_attachment", "Unattach", show=True),
        Binding("ctrl+r", "reset_input", "Reset", show=True),
        Binding("f2", "cycle_image_policy", "Images", show=True),
        Binding("escape", "cancel_stream", "Stop", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        preferences: Preferences | None = None,
        initial_text: str | None = None,
        picker_root: Path | None = None,
        preprocessor: ImagePreprocessor | None = None,
        stream_seconds: float = STREAM_SECONDS,
        preferences_path: Path | None = None,
    ) -> None:
        super().__init__()
        self.preferences = preferences or Preferences()
        self.preferences_path = preferences_path
        self.settings: ComposerSettings = self.preferences.to_settings()
        self.initial_text = initial_text
        self.picker_root = picker_root or Path.cwd()
        self.stream_seconds = stream_seconds
        self._preprocessor = preprocessor
        self._stream_timer: Timer | None = None
        self.sent: list[ComposerInput.Submitted] = []

    def compose(self) -> ComposeResult:
        yield VerticalScroll(id="transcript")
        with Vertical(id="composer-area"):
            yield AttachmentBar()
            with Horizontal(id="input-row"):
                yield ComposerInput(
                    "",
                    id="composer",
                    settings=self.settings,
                    preprocessor=self._preprocessor,
                    clipboard_images=self.preferences.attachments.clipboard_images,
                    soft_wrap=True,
                    show_line_numbers=False,
                    tab_behavior="focus",
                )
                yield Button("Send", id="send-btn", variant="primary", disabled=True)
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(AttachmentBar).set_attachments(())
        composer = self.composer
        composer.focus()
        if self.initial_text:
            composer.controller.paste_text(self.initial_text)

    @property
    def composer(self) -> ComposerInput:
        return self.query_one("#composer", ComposerInput)

    @property
    def streaming(self) -> bool:
        return self.composer.busy

    # -- composer messages ----------------------------------------------------

    def on_composer_input_submitted(self, event: ComposerInput.Submitted) -> None:
        if not event.text.strip() and not event.attachments:
            return
        self.sent.append(event)
        self._append(event.text, attachments=len(event.attachments))
        event.composer.controller.clear_input_value()
        self._start_stream()

    def on_composer_input_cancel_requested(self) -> None:
        if self._stream_timer is not None:
            self._stream_timer.stop()
            self._stream_timer = None
            self._append("(response cancelled)", reply=True)
        self._refresh_button()

    def on_composer_input_attachments_changed(
        self, event: ComposerInput.AttachmentsChanged
    ) -> None:
        self.query_one(AttachmentBar).set_attachments(event.attachments)
        self._refresh_button()

    def on_composer_input_empty_changed(self) -> None:
        self._refresh_button()

    def on_composer_input_rejected(self, event: ComposerInput.Rejected) -> None:
        severity = "error" if event.rejection.reason is RejectReason.READ_FAILED else "warning"
        self.notify(describe_rejection(event.rejection), severity=severity)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id != "send-btn":
            return
        controller = self.composer.controller
        if controller.loading:
            controller.cancel()
        else:
            controller.submit()

    # -- actions --------------------------------------------------------------

    def action_attach_files(self) -> None:
        controller = self.composer.controller

        def _attach(paths: list[Path] | None) -> None:
            if paths:
                controller.select_files(paths)
            self.composer.focus()

        self.push_screen(FilePickerScreen(self.picker_root, controller.policy), _attach)

    def action_remove_attachment(self) -> None:
        attachments = self.composer.controller.attachments
        if attachments:
            self.composer.controller.remove_attachment(attachments[-1].identity)

    def action_reset_input(self) -> None:
        self.composer.controller.reset()

    def action_cancel_stream(self) -> None:
        if self.streaming:
            self.composer.controller.cancel()

    def action_cycle_image_policy(self) -> None:
        """Step yes -> warn -> no and persist the choice."""
        controller = self.composer.controller
        order = list(ImagePolicy)
        policy = order[(order.index(controller.policy) + 1) % len(order)]
        controller.set_image_policy(policy)
        self.preferences.attachments.allow_images = policy
        save_image_policy(policy, self.preferences_path)
        self.notify(f"Image attachments: {policy.value}")

    # -- simulated response ---------------------------------------------------

    def _start_stream(self) -> None:
        self.composer.busy = True
        self._refresh_button()
        self._stream_timer = self.set_timer(self.stream_seconds, self._finish_stream)

    def _finish_stream(self) -> None:
        self._stream_timer = None
        self._append("(response received)", reply=True)
        self.composer.busy = False
        self._refresh_button()

    def _append(self, text: str, *, reply: bool = False, attachments: int = 0) -> None:
        if attachments:
            text = f"{text}\n\U0001f4ce {attachments} image(s)"
        widget = Static(text, classes="message reply" if reply else "message", markup=False)
        transcript = self.query_one("#transcript", VerticalScroll)
        transcript.mount(widget)
        transcript.scroll_end(animate=False)

    def _refresh_button(self) -> None:
        button = self.query_one("#send-btn", Button)
        controller = self.composer.controller
        if self.streaming:
            button.label = "Stop"
            button.variant = "error"
            button.disabled = False
        else:
            button.label = "Send"
            button.variant = "primary"
            button.disabled = controller.is_empty and not controller.attachments


def run_app(
    preferences: Preferences | None = None,
    initial_text: str | None = None,
    preferences_path: Path | None = None,
) -> None:
    """Run the composer demo application."""
    app = ComposerApp(
        preferences or load_preferences(preferences_path),
        initial_text=initial_text,
        preferences_path=preferences_path,
    )
    logger.info("starting composer-tui")
    app.run()
