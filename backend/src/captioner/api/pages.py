"""Browser UI: the single-page uploader and its form target."""

from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import HTMLResponse

from captioner.api.deps import CaptionProviderDep, SettingsDep
from captioner.api.v1.captions import ERROR_RESPONSES, caption_image
from captioner.schemas.caption import CaptionResponse

router = APIRouter(tags=["ui"])

_INDEX_HTML = Path(__file__).resolve().parents[1] / "static" / "index.html"


@lru_cache
def _index_html() -> str:
    return _INDEX_HTML.read_text(encoding="utf-8")


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index():
    return HTMLResponse(_index_html())


@router.post("/upload", response_model=CaptionResponse, responses=ERROR_RESPONSES)
def upload(
    provider: CaptionProviderDep,
    settings: SettingsDep,
    image: UploadFile | None = File(default=None),
):
    """Form target used by the UI; same contract as POST /v1/captions."""
    return caption_image(image, provider, settings)
