"""Central configuration for the Captioner Service."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CAPTIONER_",
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore HUGGINGFACE_API_KEY, GEMINI_API_KEY etc. (used via os.getenv in providers)
    )

    # Quick switch: overrides caption_provider when set.
    provider: Literal["huggingface", "gemini", "stub"] | None = Field(
        default=None,
        description="Set to 'huggingface', 'gemini' or 'stub' to pick a caption provider preset",
    )
    caption_provider: str = Field(
        default="captioner.services.providers.caption_huggingface.HuggingFaceCaptionProvider",
        description="Caption: HuggingFaceCaptionProvider (default), GeminiCaptionProvider, caption_stub",
    )

    # Hugging Face Inference API
    huggingface_model: str | None = Field(
        default=None,
        description="Hosted model id, e.g. Salesforce/blip-image-captioning-large",
    )
    huggingface_base_url: str | None = Field(
        default=None,
        description="Hugging Face inference API base URL",
    )
    # Google Gemini API
    gemini_model: str | None = Field(
        default=None,
        description="Gemini model: gemini-2.5-flash",
    )
    gemini_base_url: str | None = Field(
        default=None,
        description="Gemini API base URL",
    )

    request_timeout_s: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for the outbound inference call",
    )

    # Upload limits
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Largest accepted image upload in bytes",
    )

    # CORS
    cors_allow_origins: list[str] = Field(
        default=["*"],
        description="Allowed origins for browser apps",
    )

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")
    log_format: Literal["text", "json"] = Field(default="text")
    log_file_path: Path | None = Field(default=None, description="Optional log file")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
