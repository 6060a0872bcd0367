"""Provider interfaces - every inference endpoint goes through these."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedImage:
    """Validated upload, alive for a single request."""

    data: bytes
    content_type: str
    filename: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class CaptionOutput:
    """Caption returned by a provider."""

    caption: str
    model: str


class CaptionProvider(ABC):
    """Image-to-text caption provider."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model label shown to the user."""
        ...

    @abstractmethod
    def caption(self, image: UploadedImage) -> CaptionOutput:
        """Generate a caption for image. Raises CaptionServiceError on failure."""
        ...
