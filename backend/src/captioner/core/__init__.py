"""Core utilities: tracing, exceptions, logging."""

from captioner.core.exceptions import (
    CaptionerError,
    CaptionServiceError,
    ConfigurationError,
    InvalidUploadError,
    PayloadTooLargeError,
    UnsupportedMediaError,
)
from captioner.core.logging import get_logger, setup_logging
from captioner.core.tracing import get_trace_id, set_trace_id

__all__ = [
    "CaptionerError",
    "InvalidUploadError",
    "PayloadTooLargeError",
    "UnsupportedMediaError",
    "ConfigurationError",
    "CaptionServiceError",
    "get_logger",
    "setup_logging",
    "get_trace_id",
    "set_trace_id",
]
