"""Debounced height recomputation for the composer surface."""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

from ..log import logger


class TimerHandle(Protocol):
    def stop(self) -> None: ...


# Same shape as Textual's ``Widget.set_timer(delay, callback)``
SetTimer = Callable[[float, Callable[[], None]], TimerHandle]


class _LoopTimer:
    """Adapts an asyncio ``TimerHandle`` to the ``stop()`` interface."""

    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def stop(self) -> None:
        self._handle.cancel()


def loop_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """``SetTimer`` backed by the running asyncio loop."""
    return _LoopTimer(asyncio.get_running_loop().call_later(delay, callback))


class ResizeScheduler:
    """Recompute the visible row count at most once per quiet period.

    ``measure`` returns the natural number of content rows, ``apply``
    receives the row count to show.  Content taller than ``max_rows``
    is clamped and scrolls inside the surface.
    """

    MIN_ROWS = 1

    def __init__(
        self,
        set_timer: SetTimer,
        measure: Callable[[], int],
        apply: Callable[[int], None],
        *,
        max_rows: int,
        delay: float,
    ) -> None:
        self._set_timer = set_timer
        self._measure = measure
        self._apply = apply
        self.max_rows = max_rows
        self.delay = delay
        self._pending: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self) -> None:
        """Cancel any pending recomputation and arm a new one."""
        self.cancel()
        self._pending = self._set_timer(self.delay, self._fire)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.stop()
            self._pending = None

    def resize_now(self) -> int:
        """Recompute immediately, bypassing the debounce."""
        self.cancel()
        natural = max(self.MIN_ROWS, self._measure())
        rows = min(natural, self.max_rows)
        self._apply(rows)
        logger.debug("composer resized to %d rows (natural %d)", rows, natural)
        return rows

    def collapse(self) -> None:
        """Shrink to the natural minimum; content is about to be replaced."""
        self.cancel()
        self._apply(self.MIN_ROWS)

    def _fire(self) -> None:
        self._pending = None
        self.resize_now()
