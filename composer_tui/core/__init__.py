"""Composer input controller: text buffer, paste policy and attachment staging.

Nothing in this package imports Textual; a host widget implements
:class:`InputSurface` and drives a :class:`ComposerController`.
"""

from .attachments import Attachment, AttachmentOrigin, AttachmentStore
from .buffer import HeadlessSurface, InputSurface, TextBuffer
from .controller import ComposerController, PasteResult, SubmissionPayload
from .errors import ComposerError, ImagePreprocessError
from .images import ImagePreprocessor, ImageSource, PillowPreprocessor, PreprocessedImage
from .paste import ClipboardItem, PasteAction, PastePayload
from .policy import ComposerSettings, ImagePolicy, RejectReason, Rejection
from .resize import ResizeScheduler

__all__ = [
    "Attachment",
    "AttachmentOrigin",
    "AttachmentStore",
    "ClipboardItem",
    "ComposerController",
    "ComposerError",
    "ComposerSettings",
    "HeadlessSurface",
    "ImagePolicy",
    "ImagePreprocessError",
    "ImagePreprocessor",
    "ImageSource",
    "InputSurface",
    "PasteAction",
    "PastePayload",
    "PasteResult",
    "PillowPreprocessor",
    "PreprocessedImage",
    "RejectReason",
    "Rejection",
    "ResizeScheduler",
    "SubmissionPayload",
    "TextBuffer",
]
