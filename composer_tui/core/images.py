"""Image preprocessing: decode, normalize and encode as a data URL."""

from __future__ import annotations

import asyncio
import base64
import io
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageOps, UnidentifiedImageError

from ..constants import MAX_IMAGE_DIMENSION
from ..log import logger
from .errors import ImagePreprocessError

# Pillow format name -> MIME type for formats kept as-is
_KEPT_FORMATS = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


@dataclass(frozen=True)
class ImageSource:
    """Raw image input: clipboard bytes or a file on disk."""

    name: str
    data: bytes | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: Path) -> ImageSource:
        return cls(name=path.name, path=path)

    def read(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ImagePreprocessError(self.name, "no image data")
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise ImagePreprocessError(self.name, str(exc)) from exc


@dataclass(frozen=True)
class PreprocessedImage:
    """Display-ready encoding plus the normalized file descriptor."""

    encoded_data: str
    mime_type: str
    name: str
    width: int
    height: int


class ImagePreprocessor(Protocol):
    async def __call__(self, source: ImageSource) -> PreprocessedImage: ...


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _normalized_name(name: str, mime_type: str) -> str:
    stem = Path(name).stem or name
    ext = mimetypes.guess_extension(mime_type) or ".png"
    return f"{stem}{ext}"


class PillowPreprocessor:
    """Default preprocessor.

    Applies EXIF orientation, downsizes so the longest side fits
    ``max_dimension`` and re-encodes.  PNG, JPEG, GIF and WEBP keep their
    format; everything else becomes PNG.
    """

    def __init__(self, max_dimension: int = MAX_IMAGE_DIMENSION) -> None:
        self.max_dimension = max_dimension

    async def __call__(self, source: ImageSource) -> PreprocessedImage:
        return await asyncio.to_thread(self.process, source)

    def process(self, source: ImageSource) -> PreprocessedImage:
        raw = source.read()
        try:
            image, fmt, encoded = self._reencode(raw)
        except (
            UnidentifiedImageError,
            OSError,
            ValueError,
            Image.DecompressionBombError,
        ) as exc:
            raise ImagePreprocessError(source.name, str(exc)) from exc

        mime_type = _KEPT_FORMATS[fmt]
        logger.debug(
            "preprocessed %s -> %s %dx%d (%d bytes)",
            source.name,
            mime_type,
            image.width,
            image.height,
            len(encoded),
        )
        return PreprocessedImage(
            encoded_data=to_data_url(encoded, mime_type),
            mime_type=mime_type,
            name=_normalized_name(source.name, mime_type),
            width=image.width,
            height=image.height,
        )

    def _reencode(self, raw: bytes) -> tuple[Image.Image, str, bytes]:
        with Image.open(io.BytesIO(raw)) as opened:
            fmt = (opened.format or "").upper()
            image = ImageOps.exif_transpose(opened)
            image.load()

        if max(image.size) > self.max_dimension:
            image.thumbnail((self.max_dimension, self.max_dimension))

        if fmt not in _KEPT_FORMATS:
            fmt = "PNG"
        if fmt == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        elif fmt == "PNG" and image.mode == "CMYK":
            image = image.convert("RGB")

        out = io.BytesIO()
        image.save(out, format=fmt)
        return image, fmt, out.getvalue()
