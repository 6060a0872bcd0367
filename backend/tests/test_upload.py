"""Tests for upload validation."""

import pytest
from PIL import Image

from captioner.core.exceptions import (
    InvalidUploadError,
    PayloadTooLargeError,
    UnsupportedMediaError,
)
from captioner.services.upload import image_mime, read_upload
from conftest import make_image, png_header_only


def test_image_mime():
    assert image_mime("PNG") == "image/png"
    assert image_mime("JPEG") == "image/jpeg"
    assert image_mime("ICO") == "image/x-icon"
    assert image_mime(None) == "application/octet-stream"


def test_read_upload_accepts_png(png_bytes):
    image = read_upload("red.png", "image/png", png_bytes, max_bytes=1024)
    assert image.data == png_bytes
    assert image.content_type == "image/png"
    assert image.filename == "red.png"
    assert image.size == len(png_bytes)


def test_read_upload_sniffs_generic_content_type():
    jpeg = make_image((0, 128, 0), "JPEG")
    image = read_upload("photo", "application/octet-stream", jpeg, max_bytes=10_000)
    assert image.content_type == "image/jpeg"


def test_read_upload_strips_content_type_params(png_bytes):
    image = read_upload("a.png", "image/png; charset=binary", png_bytes, max_bytes=1024)
    assert image.content_type == "image/png"


@pytest.mark.parametrize("data", [None, b""])
def test_read_upload_rejects_missing_or_empty(data):
    with pytest.raises(InvalidUploadError):
        read_upload("x.png", "image/png", data, max_bytes=1024)


def test_read_upload_rejects_oversized(png_bytes):
    with pytest.raises(PayloadTooLargeError) as exc:
        read_upload("big.png", "image/png", png_bytes, max_bytes=len(png_bytes) - 1)
    assert exc.value.details["max_bytes"] == len(png_bytes) - 1


def test_read_upload_rejects_non_image_type(png_bytes):
    with pytest.raises(UnsupportedMediaError):
        read_upload("notes.txt", "text/plain", png_bytes, max_bytes=1024)


def test_read_upload_rejects_undecodable_bytes():
    with pytest.raises(InvalidUploadError):
        read_upload("fake.png", "image/png", b"\x89PNG\r\n\x1a\n garbage", max_bytes=1024)


@pytest.mark.parametrize("fmt", ["PNG", "GIF", "ICO", "PPM"])
def test_read_upload_uses_decoded_format_for_generic_type(fmt):
    data = make_image((10, 20, 30), fmt, size=16)
    image = read_upload("upload", "application/octet-stream", data, max_bytes=100_000)
    assert image.content_type == Image.MIME[fmt]


@pytest.mark.parametrize("side", [20_000, 10_000])
def test_read_upload_rejects_decompression_bomb(side):
    data = png_header_only(side, side)
    assert len(data) < 100
    with pytest.raises(InvalidUploadError) as exc:
        read_upload("bomb.png", "image/png", data, max_bytes=1024)
    assert exc.value.message == "Image dimensions are too large"
