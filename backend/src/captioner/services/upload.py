"""Upload validation - turn a raw multipart file into an UploadedImage."""

import io

from PIL import Image, UnidentifiedImageError

from captioner.core.exceptions import (
    InvalidUploadError,
    PayloadTooLargeError,
    UnsupportedMediaError,
)
from captioner.services.providers.base import UploadedImage

# Declared types that say nothing about the actual format.
_GENERIC_TYPES = {"", "application/octet-stream", "image/*"}


def open_image(data: bytes) -> Image.Image:
    """
    Open image bytes with Pillow, refusing decompression bombs.

    Images past Pillow's MAX_IMAGE_PIXELS are rejected outright, not only
    those past twice the limit.
    """
    too_large = InvalidUploadError(
        "Image dimensions are too large",
        details={"max_pixels": Image.MAX_IMAGE_PIXELS},
    )
    try:
        img = Image.open(io.BytesIO(data))
    except Image.DecompressionBombError as e:
        raise too_large from e
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidUploadError("Uploaded file is not a readable image") from e
    if Image.MAX_IMAGE_PIXELS and img.width * img.height > Image.MAX_IMAGE_PIXELS:
        img.close()
        raise too_large
    return img


def image_mime(fmt: str | None) -> str:
    """MIME type for a Pillow format name."""
    if not fmt:
        return "application/octet-stream"
    Image.init()
    return Image.MIME.get(fmt.upper()) or f"image/{fmt.lower()}"


def _verify_decodable(data: bytes) -> str | None:
    """Check the bytes are an image; return the Pillow format name."""
    with open_image(data) as img:
        fmt = img.format
        try:
            img.verify()
        except (OSError, SyntaxError, ValueError) as e:
            raise InvalidUploadError("Uploaded file is not a readable image") from e
    return fmt


def read_upload(
    filename: str | None,
    content_type: str | None,
    data: bytes | None,
    max_bytes: int,
) -> UploadedImage:
    """
    Validate one uploaded image.

    Raises:
        InvalidUploadError: nothing uploaded, empty file, or undecodable bytes.
        PayloadTooLargeError: more than max_bytes.
        UnsupportedMediaError: declared content type is not image/*.
    """
    if not data:
        raise InvalidUploadError(
            "No image uploaded" if data is None else "Uploaded image is empty",
            details={"filename": filename},
        )
    if len(data) > max_bytes:
        raise PayloadTooLargeError(
            f"Image exceeds {max_bytes} bytes",
            details={"filename": filename, "size": len(data), "max_bytes": max_bytes},
        )

    declared = (content_type or "").split(";", 1)[0].strip().lower()
    if declared not in _GENERIC_TYPES and not declared.startswith("image/"):
        raise UnsupportedMediaError(
            f"Unsupported content type {declared!r}; upload an image",
            details={"filename": filename, "content_type": declared},
        )

    fmt = _verify_decodable(data)

    mime = declared
    if declared in _GENERIC_TYPES:
        mime = image_mime(fmt)
    return UploadedImage(data=data, content_type=mime, filename=filename)
