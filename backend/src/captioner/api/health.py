"""Liveness and configuration probe."""

from fastapi import APIRouter

from captioner.core.exceptions import ConfigurationError
from captioner.schemas.caption import HealthResponse
from captioner.services.providers.registry import (
    caption_provider_path,
    get_caption_provider,
)

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthResponse)
def healthz():
    """Report the active provider; never exposes the credential."""
    path = caption_provider_path()
    try:
        provider = get_caption_provider()
    except ConfigurationError as e:
        return HealthResponse(
            status="degraded",
            provider=path.rsplit(".", 1)[-1],
            model=None,
            credential_configured=False,
            load_error=e.message,
        )
    return HealthResponse(
        status="ok",
        provider=type(provider).__name__,
        model=provider.model_name,
        credential_configured=True,
    )
