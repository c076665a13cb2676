"""User preferences for composer-tui.

Loads settings from ~/.composer-tui/preferences.yaml.
Falls back to sensible defaults if the file doesn't exist or is invalid.
Creates a default file on first run so users can discover and edit it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import (
    COMPOSER_HOME,
    MAX_IMAGE_ATTACHMENTS_PER_MESSAGE,
    MAX_ROWS,
    RESIZE_DEBOUNCE_SECONDS,
    SNIPPET_MARKERS,
    SnippetMarkers,
)
from .core.policy import ComposerSettings, ImagePolicy
from .log import logger

PREFS_PATH = COMPOSER_HOME / "preferences.yaml"

_DEFAULT_YAML = """\
# composer-tui preferences
# Delete this file to reset to defaults.

attachments:
  allow_images: "yes"            # yes | warn | no  (quote it: bare yes/no are booleans)
  max_images: 10                 # image attachments per message
  clipboard_images: false        # also look for a raster image on the system clipboard

input:
  max_rows: 20                   # rows shown before the input scrolls internally
  resize_debounce_ms: 100        # quiet period before the input height is recomputed

snippets:
  begin: "----BEGIN-SNIPPET----"
  end: "----END-SNIPPET----"
"""


@dataclass
class AttachmentPreferences:
    """Image staging settings."""

    allow_images: ImagePolicy = ImagePolicy.YES
    max_images: int = MAX_IMAGE_ATTACHMENTS_PER_MESSAGE
    clipboard_images: bool = False  # Pillow ImageGrab on each paste (opt-in)


@dataclass
class InputPreferences:
    """Text input layout settings."""

    max_rows: int = MAX_ROWS
    resize_debounce_ms: int = int(RESIZE_DEBOUNCE_SECONDS * 1000)


@dataclass
class Preferences:
    """Top-level composer preferences."""

    attachments: AttachmentPreferences = field(default_factory=AttachmentPreferences)
    input: InputPreferences = field(default_factory=InputPreferences)
    snippet_begin: str = SNIPPET_MARKERS.begin
    snippet_end: str = SNIPPET_MARKERS.end

    def to_settings(self) -> ComposerSettings:
        """The subset of preferences the composer core consumes."""
        return ComposerSettings(
            image_policy=self.attachments.allow_images,
            max_rows=self.input.max_rows,
            max_images=self.attachments.max_images,
            resize_delay=self.input.resize_debounce_ms / 1000,
            markers=SnippetMarkers(self.snippet_begin, self.snippet_end),
        )


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def load_preferences(path: Path | None = None) -> Preferences:
    """Load preferences from YAML file.

    Falls back to sensible defaults if the file doesn't exist or is invalid.
    Creates a default preferences file on first run.
    """
    path = path or PREFS_PATH
    prefs = Preferences()

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except (OSError, yaml.YAMLError):
            logger.debug("failed to read preferences from %s", path, exc_info=True)
            return prefs
        if not isinstance(data, dict):
            return prefs
        if isinstance(data.get("attachments"), dict):
            adata = data["attachments"]
            if "allow_images" in adata:
                try:
                    prefs.attachments.allow_images = ImagePolicy.parse(
                        adata["allow_images"]
                    )
                except ValueError:
                    logger.debug("unknown allow_images value %r", adata["allow_images"])
            if "max_images" in adata:
                prefs.attachments.max_images = _positive_int(
                    adata["max_images"], prefs.attachments.max_images
                )
            if "clipboard_images" in adata:
                prefs.attachments.clipboard_images = bool(adata["clipboard_images"])
        if isinstance(data.get("input"), dict):
            idata = data["input"]
            if "max_rows" in idata:
                prefs.input.max_rows = _positive_int(
                    idata["max_rows"], prefs.input.max_rows
                )
            if "resize_debounce_ms" in idata:
                prefs.input.resize_debounce_ms = _positive_int(
                    idata["resize_debounce_ms"], prefs.input.resize_debounce_ms
                )
        if isinstance(data.get("snippets"), dict):
            sdata = data["snippets"]
            if sdata.get("begin"):
                prefs.snippet_begin = str(sdata["begin"])
            if sdata.get("end"):
                prefs.snippet_end = str(sdata["end"])
    else:
        # Create default file for user to customize
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(_DEFAULT_YAML)
        except OSError:
            logger.debug("could not write default preferences to %s", path)

    return prefs


def save_image_policy(policy: ImagePolicy, path: Path | None = None) -> None:
    """Persist the allow_images preference to the preferences file.

    Surgically updates only the allow_images value, preserving the rest of the
    file (including user comments) as-is.
    """
    path = path or PREFS_PATH
    try:
        if path.exists():
            text = path.read_text()
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            text = _DEFAULT_YAML

        value = f'"{policy.value}"'
        if re.search(r"^\s+allow_images:", text, re.MULTILINE):
            text = re.sub(
                r"^(\s+allow_images:)[ \t]*(\"[^\"\n]*\"|'[^'\n]*'|[^\s#]*)",
                f"\\1 {value}",
                text,
                count=1,
                flags=re.MULTILINE,
            )
        elif re.search(r"^attachments:", text, re.MULTILINE):
            # attachments section exists but no allow_images key
            text = re.sub(
                r"^(attachments:.*)$",
                f"\\1\n  allow_images: {value}",
                text,
                count=1,
                flags=re.MULTILINE,
            )
        else:
            # No attachments section at all, append it
            text = text.rstrip() + f"\n\nattachments:\n  allow_images: {value}\n"

        path.write_text(text)
    except OSError:
        logger.debug("failed to save image policy", exc_info=True)
