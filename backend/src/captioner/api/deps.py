"""API dependencies."""

from typing import Annotated

from fastapi import Depends

from captioner.config import Settings, get_settings
from captioner.services.providers.base import CaptionProvider
from captioner.services.providers.registry import get_caption_provider


def caption_provider() -> CaptionProvider:
    """Configured provider; raises ConfigurationError if its credential is missing."""
    return get_caption_provider()


SettingsDep = Annotated[Settings, Depends(get_settings)]
CaptionProviderDep = Annotated[CaptionProvider, Depends(caption_provider)]
