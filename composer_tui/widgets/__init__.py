"""Textual widgets hosting the composer controller."""

from .attachment_bar import AttachmentBar
from .composer_input import ComposerInput, grab_clipboard_image
from .screens import AcceptedFilesTree, FilePickerScreen

__all__ = [
    "AcceptedFilesTree",
    "AttachmentBar",
    "ComposerInput",
    "FilePickerScreen",
    "grab_clipboard_image",
]
