"""Shared test fixtures for the composer-tui test suite."""

from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from composer_tui.core import (
    Attachment,
    ComposerController,
    ComposerSettings,
    HeadlessSurface,
    ImagePreprocessError,
    ImageSource,
    PreprocessedImage,
    Rejection,
)


# -- Time and scheduling doubles ----------------------------------------------


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.stopped = False
        self.fired = False

    def stop(self) -> None:
        self.stopped = True


class ManualTimers:
    """``set_timer`` stand-in; timers only fire when the test says so."""

    def __init__(self) -> None:
        self.created: list[ManualTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.created.append(timer)
        return timer

    @property
    def active(self) -> list[ManualTimer]:
        return [t for t in self.created if not t.stopped and not t.fired]

    def fire_all(self) -> int:
        fired = 0
        for timer in self.active:
            timer.fired = True
            timer.callback()
            fired += 1
        return fired


class Deferred:
    """``call_after_refresh`` stand-in; callbacks run on :meth:`flush`."""

    def __init__(self) -> None:
        self.queue: list[Callable[[], None]] = []

    def __call__(self, callback: Callable[[], None]) -> None:
        self.queue.append(callback)

    def flush(self) -> None:
        while self.queue:
            self.queue.pop(0)()


# -- Image helpers -------------------------------------------------------------


def make_image_bytes(
    size: tuple[int, int] = (4, 4), fmt: str = "PNG", color: str = "red"
) -> bytes:
    mode = "RGB" if fmt in ("JPEG", "BMP") else "RGBA"
    out = io.BytesIO()
    Image.new(mode, size, color).save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def png_file(tmp_path: Path, png_bytes: bytes) -> Path:
    path = tmp_path / "shot.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text("alpha\nbeta", encoding="utf-8")
    return path


class GatedPreprocessor:
    """Preprocessor whose results are released by name.

    Lets a test decide the order in which concurrent preprocessing
    finishes, or hold one open across a reset.
    """

    def __init__(self, auto: bool = False) -> None:
        self.auto = auto
        self.gates: dict[str, asyncio.Event] = {}
        self.started: list[str] = []
        self.failing: set[str] = set()

    def release(self, name: str) -> None:
        self._gate(name).set()

    def _gate(self, name: str) -> asyncio.Event:
        if name not in self.gates:
            self.gates[name] = asyncio.Event()
        return self.gates[name]

    async def __call__(self, source: ImageSource) -> PreprocessedImage:
        self.started.append(source.name)
        if not self.auto:
            await self._gate(source.name).wait()
        if source.name in self.failing:
            raise ImagePreprocessError(source.name, "cannot identify image file")
        return PreprocessedImage(
            encoded_data=f"data:image/png;base64,{source.name}",
            mime_type="image/png",
            name=f"{Path(source.name).stem}.png",
            width=4,
            height=4,
        )


# -- Controller harness --------------------------------------------------------


@dataclass
class Harness:
    """A controller wired to a headless surface and recording doubles."""

    controller: ComposerController
    surface: HeadlessSurface
    timers: ManualTimers
    deferred: Deferred
    preprocessor: GatedPreprocessor
    sent: list[tuple[str, list[Attachment]]] = field(default_factory=list)
    rejections: list[Rejection] = field(default_factory=list)
    attachment_events: list[tuple[Attachment, ...]] = field(default_factory=list)
    empty_events: list[bool] = field(default_factory=list)
    cancelled: int = 0
    loading_events: list[bool] = field(default_factory=list)

    @property
    def reasons(self) -> list:
        return [r.reason for r in self.rejections]


@pytest.fixture
def make_harness():
    """Factory building a :class:`Harness`; keyword args override settings."""

    def _make(
        text: str = "",
        *,
        visible_rows: int = 1,
        preprocessor: GatedPreprocessor | None = None,
        **overrides,
    ) -> Harness:
        settings = replace(ComposerSettings(), **overrides)
        surface = HeadlessSurface(text, visible_rows=visible_rows)
        timers = ManualTimers()
        deferred = Deferred()
        pre = preprocessor or GatedPreprocessor(auto=True)
        harness = Harness(
            controller=None,  # type: ignore[arg-type]
            surface=surface,
            timers=timers,
            deferred=deferred,
            preprocessor=pre,
        )

        def cancel_stream() -> None:
            harness.cancelled += 1

        harness.controller = ComposerController(
            surface,
            lambda text, attachments: harness.sent.append((text, attachments)),
            settings=settings,
            cancel_stream=cancel_stream,
            set_loading=harness.loading_events.append,
            preprocessor=pre,
            set_timer=timers,
            defer=deferred,
            on_reject=harness.rejections.append,
            on_attachments_changed=harness.attachment_events.append,
            on_empty_change=harness.empty_events.append,
        )
        return harness

    return _make


@pytest.fixture
def make_image():
    """Factory for encoded test images: ``make_image(size, fmt, color)``."""
    return make_image_bytes


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def deferred() -> Deferred:
    return Deferred()
