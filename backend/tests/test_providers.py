"""Tests for caption providers with a simulated upstream."""

import base64

import httpx
import pytest

from captioner.core.exceptions import CaptionServiceError, ConfigurationError, InvalidUploadError
from captioner.services.providers.base import UploadedImage
from captioner.services.providers.caption_gemini import GeminiCaptionProvider
from captioner.services.providers.caption_huggingface import HuggingFaceCaptionProvider
from captioner.services.providers.caption_stub import StubCaptionProvider
from captioner.services.providers.registry import get_caption_provider
from conftest import png_header_only


@pytest.fixture()
def image(png_bytes) -> UploadedImage:
    return UploadedImage(data=png_bytes, content_type="image/png", filename="red.png")


def test_huggingface_caption(upstream, image):
    out = HuggingFaceCaptionProvider().caption(image)

    assert out.caption == "a dog running on grass"
    assert out.model == HuggingFaceCaptionProvider.DEFAULT_MODEL
    assert len(upstream.calls) == 1
    call = upstream.calls[0]
    assert call["url"].endswith("/models/Salesforce/blip-image-captioning-large")
    assert call["headers"]["Authorization"] == "Bearer hf_test_token"
    assert call["headers"]["Content-Type"] == "image/png"
    assert call["content"] == image.data


def test_huggingface_accepts_object_payload(upstream, image):
    upstream.reply(200, {"generated_text": "  a red square  "})
    assert HuggingFaceCaptionProvider().caption(image).caption == "a red square"


def test_huggingface_model_and_url_from_settings(monkeypatch, reset_caches, upstream, image):
    monkeypatch.setenv("CAPTIONER_HUGGINGFACE_MODEL", "nlpconnect/vit-gpt2-image-captioning")
    monkeypatch.setenv("CAPTIONER_HUGGINGFACE_BASE_URL", "https://example.test/")
    reset_caches()

    out = HuggingFaceCaptionProvider().caption(image)

    assert out.model == "nlpconnect/vit-gpt2-image-captioning"
    assert upstream.calls[0]["url"] == "https://example.test/models/nlpconnect/vit-gpt2-image-captioning"


def test_huggingface_rate_limited(upstream, image):
    upstream.reply(429, {"error": "Rate limit reached"})
    with pytest.raises(CaptionServiceError) as exc:
        HuggingFaceCaptionProvider().caption(image)
    assert exc.value.details["upstream_status"] == 429
    assert exc.value.details["upstream_error"] == "Rate limit reached"
    assert len(upstream.calls) == 1


def test_huggingface_model_loading(upstream, image):
    upstream.reply(503, {"error": "Model is currently loading", "estimated_time": 20.0})
    with pytest.raises(CaptionServiceError):
        HuggingFaceCaptionProvider().caption(image)


@pytest.mark.parametrize("body", [[], [{}], {"unexpected": True}, [{"generated_text": ""}]])
def test_huggingface_no_caption_in_payload(upstream, image, body):
    upstream.reply(200, body)
    with pytest.raises(CaptionServiceError):
        HuggingFaceCaptionProvider().caption(image)


def test_huggingface_non_json_body(upstream, image):
    upstream.responder = lambda url, kwargs: httpx.Response(200, text="<html>oops</html>")
    with pytest.raises(CaptionServiceError):
        HuggingFaceCaptionProvider().caption(image)


def test_huggingface_network_failure(upstream, image):
    def fail(url, kwargs):
        raise httpx.ConnectError("connection refused")

    upstream.responder = fail
    with pytest.raises(CaptionServiceError) as exc:
        HuggingFaceCaptionProvider().caption(image)
    assert exc.value.message == "Captioning service unreachable"


def test_huggingface_timeout(upstream, image):
    def slow(url, kwargs):
        raise httpx.ReadTimeout("timed out")

    upstream.responder = slow
    with pytest.raises(CaptionServiceError) as exc:
        HuggingFaceCaptionProvider().caption(image)
    assert exc.value.message == "Captioning service timed out"


def test_missing_credential_blocks_outbound_call(monkeypatch, upstream):
    monkeypatch.delenv("HUGGINGFACE_API_KEY")
    with pytest.raises(ConfigurationError) as exc:
        HuggingFaceCaptionProvider()
    assert exc.value.details == {"env": "HUGGINGFACE_API_KEY"}
    assert upstream.calls == []


def test_gemini_caption(monkeypatch, upstream, image):
    monkeypatch.setenv("GEMINI_API_KEY", "gm_test")
    upstream.reply(
        200,
        {"candidates": [{"content": {"parts": [{"text": "A small red square.\n"}]}}]},
    )

    out = GeminiCaptionProvider().caption(image)

    assert out.caption == "A small red square."
    assert out.model == "gemini-2.5-flash"
    call = upstream.calls[0]
    assert call["url"].endswith("/models/gemini-2.5-flash:generateContent")
    assert call["params"] == {"key": "gm_test"}
    inline = call["json"]["contents"][0]["parts"][1]["inline_data"]
    assert inline["mime_type"] == "image/jpeg"
    assert base64.b64decode(inline["data"])[:3] == b"\xff\xd8\xff"


def test_gemini_without_candidates(monkeypatch, upstream, image):
    monkeypatch.setenv("GEMINI_API_KEY", "gm_test")
    upstream.reply(200, {"promptFeedback": {"blockReason": "SAFETY"}})
    with pytest.raises(CaptionServiceError):
        GeminiCaptionProvider().caption(image)


def test_gemini_refuses_decompression_bomb(monkeypatch, upstream):
    monkeypatch.setenv("GEMINI_API_KEY", "gm_test")
    bomb = UploadedImage(data=png_header_only(10_000, 10_000), content_type="image/png")

    with pytest.raises(InvalidUploadError):
        GeminiCaptionProvider().caption(bomb)
    assert upstream.calls == []


def test_gemini_requires_key():
    with pytest.raises(ConfigurationError):
        GeminiCaptionProvider()


def test_stub_provider(image):
    out = StubCaptionProvider().caption(image)
    assert out.model == "stub"
    assert "image/png" in out.caption


def test_registry_default_is_huggingface():
    assert isinstance(get_caption_provider(), HuggingFaceCaptionProvider)
    assert get_caption_provider() is get_caption_provider()


def test_registry_preset(monkeypatch, reset_caches):
    monkeypatch.setenv("CAPTIONER_PROVIDER", "stub")
    reset_caches()
    assert isinstance(get_caption_provider(), StubCaptionProvider)


def test_registry_bad_path(monkeypatch, reset_caches):
    monkeypatch.setenv("CAPTIONER_CAPTION_PROVIDER", "captioner.services.providers.nope.Missing")
    reset_caches()
    with pytest.raises(ConfigurationError):
        get_caption_provider()
