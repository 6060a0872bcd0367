"""Application exceptions."""


class CaptionerError(Exception):
    """Base exception for Captioner Service."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidUploadError(CaptionerError):
    """Upload missing, empty or not an image."""


class PayloadTooLargeError(CaptionerError):
    """Upload exceeds the configured size limit."""


class UnsupportedMediaError(CaptionerError):
    """Declared content type is not an image."""


class ConfigurationError(CaptionerError):
    """Credential missing or provider misconfigured."""


class CaptionServiceError(CaptionerError):
    """Inference endpoint failed or returned no caption."""
