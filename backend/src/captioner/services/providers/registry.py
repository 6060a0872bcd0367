"""Provider registry - load the caption provider from config."""

import importlib
from functools import lru_cache

from captioner.config import get_settings
from captioner.core.exceptions import ConfigurationError
from captioner.services.providers.base import CaptionProvider

# Presets for settings.provider
_CAPTION_BY_NAME = {
    "huggingface": "captioner.services.providers.caption_huggingface.HuggingFaceCaptionProvider",
    "gemini": "captioner.services.providers.caption_gemini.GeminiCaptionProvider",
    "stub": "captioner.services.providers.caption_stub.StubCaptionProvider",
}


def _load_class(dotted_path: str) -> type:
    """Load class from dotted path like 'captioner.services.providers.caption_stub.StubCaptionProvider'."""
    module_path, _, class_name = dotted_path.rpartition(".")
    try:
        mod = importlib.import_module(module_path)
        return getattr(mod, class_name)
    except (ImportError, AttributeError, ValueError) as e:
        raise ConfigurationError(
            f"Cannot load caption provider {dotted_path!r}",
            details={"provider_path": dotted_path},
        ) from e


def caption_provider_path() -> str:
    """Dotted path of the configured caption provider."""
    settings = get_settings()
    return _CAPTION_BY_NAME.get(settings.provider or "") or settings.caption_provider


@lru_cache
def get_caption_provider() -> CaptionProvider:
    """
    Get configured caption provider (built once per process).

    Raises ConfigurationError when the provider's credential is missing, so
    no outbound call can be attempted without one.
    """
    cls = _load_class(caption_provider_path())
    return cls()
