"""Modal screen widgets for composer-tui."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import DirectoryTree, Static

from ..core.files import is_accepted
from ..core.policy import ImagePolicy


class AcceptedFilesTree(DirectoryTree):
    """Directory tree showing only folders and attachable files."""

    def __init__(self, path: Path, policy: ImagePolicy, **kwargs) -> None:
        super().__init__(path, **kwargs)
        self.policy = policy

    def filter_paths(self, paths: Iterable[Path]) -> Iterable[Path]:
        return [
            path
            for path in paths
            if not path.name.startswith(".")
            and (path.is_dir() or is_accepted(path, self.policy))
        ]


class FilePickerScreen(ModalScreen[list[Path]]):
    """Pick one or more files to attach.

    Enter on a file toggles it; Ctrl+S attaches the selection and Escape
    closes without attaching anything.
    """

    DEFAULT_CSS = """
    FilePickerScreen {
        align: center middle;
    }
    #picker-box {
        width: 80%;
        height: 80%;
        border: round $primary;
        background: $surface;
        padding: 0 1;
    }
    #picker-tree {
        height: 1fr;
    }
    #picker-selection {
        height: auto;
        max-height: 5;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "confirm", "Attach", show=True),
        Binding("escape", "dismiss_picker", "Cancel", show=True),
    ]

    def __init__(self, root: Path, policy: ImagePolicy) -> None:
        super().__init__()
        self.root = root
        self.policy = policy
        self.selected: list[Path] = []

    def compose(self) -> ComposeResult:
        with Vertical(id="picker-box"):
            yield Static(" Attach files  (Enter: toggle, Ctrl+S: attach, Esc: cancel)")
            yield AcceptedFilesTree(self.root, self.policy, id="picker-tree")
            yield Static("No files selected", id="picker-selection", markup=False)

    def on_directory_tree_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        event.stop()
        self.toggle(Path(event.path))

    def toggle(self, path: Path) -> None:
        if path in self.selected:
            self.selected.remove(path)
        else:
            self.selected.append(path)
        label = self.query_one("#picker-selection", Static)
        if self.selected:
            label.update("\n".join(p.name for p in self.selected))
        else:
            label.update("No files selected")

    def action_confirm(self) -> None:
        self.dismiss(list(self.selected))

    def action_dismiss_picker(self) -> None:
        self.dismiss([])
