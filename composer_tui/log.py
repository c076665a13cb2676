"""Package logger for composer-tui."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger("composer_tui")

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(path: Path | None = None, level: int = logging.INFO) -> None:
    """Send package logs to *path*.

    The TUI owns the terminal while it runs, so nothing is written to
    stderr.  Without a path the logger stays silent.
    """
    logger.setLevel(level)
    if path is None:
        logger.addHandler(logging.NullHandler())
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
