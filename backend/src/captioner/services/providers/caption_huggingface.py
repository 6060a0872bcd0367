"""Hugging Face Inference API caption provider."""

import os
from typing import Any

from captioner.core.exceptions import CaptionServiceError, ConfigurationError
from captioner.core.logging import get_logger
from captioner.services.providers.base import (
    CaptionOutput,
    CaptionProvider,
    UploadedImage,
)
from captioner.services.providers.http import post_json

logger = get_logger("captioner.services.providers.caption_huggingface")


class HuggingFaceCaptionProvider(CaptionProvider):
    """Caption via a hosted image-to-text model on the Hugging Face Inference API."""

    DEFAULT_MODEL = "Salesforce/blip-image-captioning-large"
    API_URL = "https://router.huggingface.co/hf-inference"
    API_KEY_ENV = "HUGGINGFACE_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Args:
            api_key: Hugging Face token, default from HUGGINGFACE_API_KEY env
            base_url: Override API base URL (e.g. a dedicated Inference Endpoint)
            model: Model id, default Salesforce/blip-image-captioning-large
            timeout: Request timeout in seconds, default from settings

        Raises:
            ConfigurationError: no API key configured.
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
            or getattr(settings, "huggingface_base_url", None)
            or self.API_URL
        )
        self._model = (
            model
            or getattr(settings, "huggingface_model", None)
            or self.DEFAULT_MODEL
        )
        self._timeout = timeout or settings.request_timeout_s

    @property
    def model_name(self) -> str:
        return self._model

    def caption(self, image: UploadedImage) -> CaptionOutput:
        """Send raw image bytes to the model and read generated_text."""
        url = f"{self._base_url.rstrip('/')}/models/{self._model}"
        logger.info(
            "Sending %d bytes (%s) to Hugging Face model %s",
            image.size,
            image.content_type,
            self._model,
        )
        data = post_json(
            url,
            content=image.data,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": image.content_type,
                "Accept": "application/json",
            },
            timeout=self._timeout,
            provider="huggingface",
        )
        caption = _parse_generated_text(data)
        if not caption:
            logger.warning("Hugging Face response had no generated_text: %r", data)
            raise CaptionServiceError(
                "Captioning service returned no caption",
                details={"provider": "huggingface"},
            )
        return CaptionOutput(caption=caption, model=self._model)


def _parse_generated_text(data: Any) -> str:
    """Extract caption from [{"generated_text": ...}] or {"generated_text": ...}."""
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return ""
    text = data.get("generated_text")
    if not isinstance(text, str):
        return ""
    return text.strip()
