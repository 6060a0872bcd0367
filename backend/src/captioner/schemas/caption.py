"""Caption request/response schemas."""

from pydantic import BaseModel, Field


class CaptionResponse(BaseModel):
    """Successful caption for one upload."""

    caption: str
    model: str
    processing_time_ms: int = Field(..., ge=0)
    filename: str | None = None
    trace_id: str


class ErrorResponse(BaseModel):
    """Error body; extra keys carry error details."""

    model_config = {"extra": "allow"}

    detail: str
    trace_id: str


class HealthResponse(BaseModel):
    status: str
    provider: str
    model: str | None
    credential_configured: bool
    load_error: str | None = None
