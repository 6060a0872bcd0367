"""Google Gemini caption provider via the generateContent API."""

import base64
import io
import os
from typing import Any

from captioner.core.exceptions import (
    CaptionServiceError,
    ConfigurationError,
    InvalidUploadError,
)
from captioner.core.logging import get_logger
from captioner.services.providers.base import (
    CaptionOutput,
    CaptionProvider,
    UploadedImage,
)
from captioner.services.providers.http import post_json
from captioner.services.upload import open_image

logger = get_logger("captioner.services.providers.caption_gemini")

_CAPTION_PROMPT = "Describe this image in detail. Provide a clear, descriptive caption."

# Gemini receives every upload as JPEG at this quality.
_JPEG_QUALITY = 85


class GeminiCaptionProvider(CaptionProvider):
    """Caption via Google Gemini (gemini-2.5-flash)."""

    DEFAULT_MODEL = "gemini-2.5-flash"
    API_URL = "https://generativelanguage.googleapis.com/v1beta"
    API_KEY_ENV = "GEMINI_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Args:
            api_key: Gemini API key, default from GEMINI_API_KEY env
            base_url: Override API base URL
            model: Model name, default gemini-2.5-flash
            timeout: Request timeout in seconds, default from settings
        """
        from captioner.config import get_settings

        settings = get_settings()
        self._api_key = (
            api_key or os.getenv(self.API_KEY_ENV, "") or ""
        ).strip()
        if not self._api_key:
            raise ConfigurationError(
                f"{self.API_KEY_ENV} is not set. Add it to backend/.env or set the env var.",
                details={"env": self.API_KEY_ENV},
            )
        self._base_url = (
            base_url
            or getattr(settings, "gemini_base_url", None)
            or self.API_URL
        )
        self._model = (
            model
            or getattr(settings, "gemini_model", None)
            or self.DEFAULT_MODEL
        )
        self._timeout = timeout or settings.request_timeout_s

    @property
    def model_name(self) -> str:
        return self._model

    def caption(self, image: UploadedImage) -> CaptionOutput:
        """Generate caption via Gemini generateContent."""
        b64 = _bytes_to_base64(_to_jpeg(image.data))
        url = f"{self._base_url.rstrip('/')}/models/{self._model}:generateContent"
        payload: dict[str, Any] = {
            "contents": [
                {
                    "parts": [
                        {"text": _CAPTION_PROMPT},
                        {
                            "inline_data": {
                                "mime_type": "image/jpeg",
                                "data": b64,
                            }
                        },
                    ]
                }
            ]
        }
        logger.info("Sending request to Gemini model %s", self._model)
        data = post_json(
            url,
            json=payload,
            params={"key": self._api_key},
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
            provider="gemini",
        )
        caption = _parse_candidate_text(data)
        if not caption:
            logger.warning("Gemini response had no caption text")
            raise CaptionServiceError(
                "Captioning service returned no caption",
                details={"provider": "gemini"},
            )
        return CaptionOutput(caption=caption, model=self._model)


def _to_jpeg(data: bytes) -> bytes:
    """Re-encode any decodable image as RGB JPEG; decompression bombs are refused."""
    buf = io.BytesIO()
    with open_image(data) as img:
        try:
            img.convert("RGB").save(buf, format="JPEG", quality=_JPEG_QUALITY)
        except (OSError, SyntaxError, ValueError) as e:
            raise InvalidUploadError("Uploaded file is not a readable image") from e
    return buf.getvalue()


def _bytes_to_base64(data: bytes) -> str:
    """Encode bytes to base64 string."""
    return base64.b64encode(data).decode("ascii")


def _parse_candidate_text(data: Any) -> str:
    """Read candidates[0].content.parts[0].text, or '' when absent."""
    if not isinstance(data, dict):
        return ""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text.strip() if isinstance(text, str) else ""
