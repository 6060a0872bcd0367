"""Pluggable caption providers."""

from captioner.services.providers.base import (
    CaptionOutput,
    CaptionProvider,
    UploadedImage,
)

__all__ = [
    "CaptionProvider",
    "CaptionOutput",
    "UploadedImage",
]
