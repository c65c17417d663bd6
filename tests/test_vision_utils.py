from __future__ import annotations

import io
import struct
import zlib

import pytest
from PIL import Image

from audible_vision.vision.utils import format_from_file_name, validate_image


def _image_bytes(size: tuple[int, int], fmt: str) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color="blue").save(buffer, format=fmt)
    return buffer.getvalue()


def _png_header(width: int, height: int) -> bytes:
    """A 1-bit grayscale PNG whose header declares the given size; the pixel data is never read."""
    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    ihdr = struct.pack(">IIBBBBB", width, height, 1, 0, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", ihdr)
        + chunk(b"IDAT", zlib.compress(b""))
        + chunk(b"IEND", b"")
    )


def test_validate_image_detects_format(sample_image_bytes: bytes) -> None:
    assert validate_image(sample_image_bytes, "whatever.bin") == "PNG"
    assert validate_image(_image_bytes((60, 80), "JPEG"), "photo.jpg") == "JPEG"


def test_validate_image_rejects_empty() -> None:
    with pytest.raises(ValueError, match="empty"):
        validate_image(b"", "blank.png")


@pytest.mark.parametrize("size", [(49, 100), (100, 10)])
def test_validate_image_rejects_small_dimensions(size: tuple[int, int]) -> None:
    with pytest.raises(ValueError, match="Invalid image dimensions"):
        validate_image(_image_bytes(size, "PNG"), "small.png")


def test_validate_image_rejects_unsupported_format() -> None:
    with pytest.raises(ValueError, match="Unsupported image format"):
        validate_image(_image_bytes((100, 100), "PPM"), "image.ppm")


def test_validate_image_falls_back_to_file_name_hint() -> None:
    assert validate_image(b"not really an image", "scan.tiff") == "TIFF"


def test_validate_image_unknown_bytes_without_hint() -> None:
    with pytest.raises(ValueError, match="Unrecognized image format"):
        validate_image(b"not really an image", "notes.txt")


def test_format_from_file_name() -> None:
    assert format_from_file_name("Photo.JPEG") == "JPEG"
    assert format_from_file_name("dir/scan.tif") == "TIFF"
    assert format_from_file_name("notes.txt") is None
    assert format_from_file_name("") is None


def test_validate_image_accepts_maximum_dimensions() -> None:
    previous = Image.MAX_IMAGE_PIXELS

    assert validate_image(_png_header(16000, 16000), "big.png") == "PNG"
    assert Image.MAX_IMAGE_PIXELS == previous


def test_validate_image_rejects_oversized_dimensions() -> None:
    with pytest.raises(ValueError, match="Invalid image dimensions"):
        validate_image(_png_header(16001, 16000), "wide.png")


def test_validate_image_reports_huge_images_as_invalid() -> None:
    with pytest.raises(ValueError, match="Invalid image dimensions"):
        validate_image(_png_header(40000, 40000), "huge.png")
