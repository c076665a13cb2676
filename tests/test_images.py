"""Tests for composer_tui.core.images -- Pillow preprocessing."""

from __future__ import annotations

import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from composer_tui.core import ImagePreprocessError, ImageSource, PillowPreprocessor
from composer_tui.core.images import to_data_url


def _decode(data_url: str) -> Image.Image:
    _, payload = data_url.split(",", 1)
    return Image.open(io.BytesIO(base64.b64decode(payload)))


class TestImageSource:
    def test_bytes_take_precedence(self):
        assert ImageSource("x", data=b"abc").read() == b"abc"

    def test_reads_path(self, png_file: Path, png_bytes: bytes):
        assert ImageSource.from_path(png_file).read() == png_bytes

    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(ImagePreprocessError):
            ImageSource.from_path(tmp_path / "gone.png").read()

    def test_no_data(self):
        with pytest.raises(ImagePreprocessError) as exc_info:
            ImageSource("empty").read()
        assert exc_info.value.name == "empty"


class TestPillowPreprocessor:
    def test_png_stays_png(self, png_bytes):
        result = PillowPreprocessor().process(ImageSource("shot.png", data=png_bytes))
        assert result.mime_type == "image/png"
        assert result.name == "shot.png"
        assert result.encoded_data.startswith("data:image/png;base64,")
        assert (result.width, result.height) == (4, 4)

    def test_jpeg_stays_jpeg(self, make_image):
        data = make_image((8, 6), "JPEG")
        result = PillowPreprocessor().process(ImageSource("photo.jpg", data=data))
        assert result.mime_type == "image/jpeg"
        assert _decode(result.encoded_data).format == "JPEG"

    def test_other_formats_become_png(self, make_image):
        data = make_image((5, 5), "BMP")
        result = PillowPreprocessor().process(ImageSource("old.bmp", data=data))
        assert result.mime_type == "image/png"
        assert result.name == "old.png"
        assert _decode(result.encoded_data).format == "PNG"

    def test_large_images_are_downsized(self, make_image):
        data = make_image((400, 100))
        result = PillowPreprocessor(max_dimension=200).process(
            ImageSource("wide.png", data=data)
        )
        assert (result.width, result.height) == (200, 50)
        assert _decode(result.encoded_data).size == (200, 50)

    def test_small_images_keep_size(self, make_image):
        data = make_image((30, 20))
        result = PillowPreprocessor(max_dimension=200).process(
            ImageSource("small.png", data=data)
        )
        assert (result.width, result.height) == (30, 20)

    def test_garbage_raises(self):
        with pytest.raises(ImagePreprocessError):
            PillowPreprocessor().process(ImageSource("junk.png", data=b"nope"))

    def test_pasted_name_gets_extension(self, png_bytes):
        result = PillowPreprocessor().process(ImageSource("pasted-image", data=png_bytes))
        assert result.name == "pasted-image.png"

    @pytest.mark.asyncio
    async def test_async_call(self, png_file: Path):
        result = await PillowPreprocessor()(ImageSource.from_path(png_file))
        assert result.mime_type == "image/png"


def test_to_data_url():
    assert to_data_url(b"hi", "image/gif") == "data:image/gif;base64,aGk="


def _lab_tiff() -> bytes:
    out = io.BytesIO()
    Image.new("LAB", (4, 4)).save(out, format="TIFF")
    return out.getvalue()


class TestPillowFailures:
    """Every Pillow failure surfaces as ImagePreprocessError."""

    def test_unwritable_mode(self):
        with pytest.raises(ImagePreprocessError) as exc_info:
            PillowPreprocessor().process(ImageSource("lab.tiff", data=_lab_tiff()))
        assert exc_info.value.name == "lab.tiff"

    def test_decompression_bomb(self, make_image, monkeypatch):
        data = make_image((8, 8))
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        with pytest.raises(ImagePreprocessError):
            PillowPreprocessor().process(ImageSource("bomb.png", data=data))
