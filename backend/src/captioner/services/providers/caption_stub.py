"""Stub caption provider."""

from captioner.services.providers.base import (
    CaptionOutput,
    CaptionProvider,
    UploadedImage,
)


class StubCaptionProvider(CaptionProvider):
    """Stub implementation - returns placeholder caption, no network."""

    @property
    def model_name(self) -> str:
        return "stub"

    def caption(self, image: UploadedImage) -> CaptionOutput:
        """Return placeholder caption."""
        return CaptionOutput(
            caption=f"[Stub: {image.content_type}, {image.size} bytes]",
            model=self.model_name,
        )
