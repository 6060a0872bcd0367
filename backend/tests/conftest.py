"""Shared fixtures: isolated settings, fake upstream, sample images."""

import io
import struct
import zlib
from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from captioner.config import get_settings
from captioner.services.providers.registry import get_caption_provider


def make_image(color: tuple[int, int, int], fmt: str = "PNG", size: int = 4) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (size, size), color).save(buf, format=fmt)
    return buf.getvalue()


def png_header_only(width: int, height: int) -> bytes:
    """A few dozen bytes of PNG whose IHDR declares width x height."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


class FakeUpstream:
    """Stands in for httpx.post; records every outbound call."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.responder: Callable[[str, dict], httpx.Response] = self._default

    @staticmethod
    def _default(url: str, kwargs: dict) -> httpx.Response:
        return httpx.Response(200, json=[{"generated_text": "a dog running on grass"}])

    def reply(self, status: int, body) -> None:
        self.responder = lambda url, kwargs: httpx.Response(status, json=body)

    def __call__(self, url: str, **kwargs) -> httpx.Response:
        self.calls.append({"url": url, **kwargs})
        resp = self.responder(url, kwargs)
        resp.request = httpx.Request("POST", url)
        return resp


def _reset_caches() -> None:
    get_settings.cache_clear()
    get_caption_provider.cache_clear()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    for name in ("CAPTIONER_PROVIDER", "CAPTIONER_CAPTION_PROVIDER", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf_test_token")
    _reset_caches()
    yield
    _reset_caches()


@pytest.fixture()
def reset_caches() -> Callable[[], None]:
    """Call after changing env vars inside a test."""
    return _reset_caches


@pytest.fixture()
def upstream(monkeypatch) -> FakeUpstream:
    fake = FakeUpstream()
    monkeypatch.setattr(httpx, "post", fake)
    return fake


@pytest.fixture()
def png_bytes() -> bytes:
    return make_image((200, 30, 30))


@pytest.fixture()
def client():
    from captioner.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()
