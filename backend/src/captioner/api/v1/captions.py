"""Caption endpoint: upload one image, get one caption."""

import time

from fastapi import APIRouter, File, UploadFile

from captioner.api.deps import CaptionProviderDep, SettingsDep
from captioner.core.logging import get_logger
from captioner.core.tracing import get_trace_id
from captioner.schemas.caption import CaptionResponse, ErrorResponse
from captioner.services.upload import read_upload

router = APIRouter(prefix="/captions", tags=["captions"])
logger = get_logger("captioner.api.v1.captions")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing, empty or unreadable image"},
    413: {"model": ErrorResponse, "description": "Image too large"},
    415: {"model": ErrorResponse, "description": "Not an image"},
    502: {"model": ErrorResponse, "description": "Captioning service failed"},
}


def caption_image(
    image: UploadFile | None,
    provider: CaptionProviderDep,
    settings: SettingsDep,
) -> CaptionResponse:
    """Validate the upload, make the single provider call, build the response."""
    start = time.perf_counter()
    filename = image.filename if image else None
    # One byte past the limit is enough to tell it is too large.
    data = image.file.read(settings.max_upload_bytes + 1) if image else None
    upload = read_upload(
        filename=filename,
        content_type=image.content_type if image else None,
        data=data,
        max_bytes=settings.max_upload_bytes,
    )
    logger.info(
        "Caption request: filename=%s type=%s size=%d",
        upload.filename,
        upload.content_type,
        upload.size,
    )
    out = provider.caption(upload)
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.info("Caption ready in %dms via %s", elapsed_ms, out.model)
    return CaptionResponse(
        caption=out.caption,
        model=out.model,
        processing_time_ms=elapsed_ms,
        filename=upload.filename,
        trace_id=get_trace_id(),
    )


@router.post("", response_model=CaptionResponse, responses=ERROR_RESPONSES)
def create_caption(
    provider: CaptionProviderDep,
    settings: SettingsDep,
    image: UploadFile | None = File(default=None),
):
    """Caption an uploaded image (multipart field `image`)."""
    return caption_image(image, provider, settings)
