"""Outbound HTTP call shared by the hosted-API providers."""

from typing import Any

import httpx

from captioner.core.exceptions import CaptionServiceError
from captioner.core.logging import get_logger

logger = get_logger("captioner.services.providers.http")

# Upstream bodies are logged truncated; some providers echo large payloads.
_LOG_BODY_CHARS = 500


def _upstream_message(resp: httpx.Response) -> str:
    """Best-effort error text from an upstream error body."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:_LOG_BODY_CHARS]
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            return str(err.get("message") or err)
        if err:
            return str(err)
    return resp.text[:_LOG_BODY_CHARS]


def post_json(
    url: str,
    *,
    headers: dict[str, str],
    timeout: float,
    provider: str,
    json: dict[str, Any] | None = None,
    content: bytes | None = None,
    params: dict[str, str] | None = None,
) -> Any:
    """
    POST to an inference endpoint and return the decoded JSON body.

    Any transport failure, non-2xx status or non-JSON body is raised as
    CaptionServiceError; the upstream status (if any) goes into details.
    """
    try:
        resp = httpx.post(
            url,
            json=json,
            content=content,
            params=params,
            headers=headers,
            timeout=timeout,
        )
    except httpx.TimeoutException as e:
        logger.warning("%s request timed out after %.0fs", provider, timeout)
        raise CaptionServiceError(
            "Captioning service timed out",
            details={"provider": provider},
        ) from e
    except httpx.HTTPError as e:
        logger.warning("%s request failed: %s", provider, e)
        raise CaptionServiceError(
            "Captioning service unreachable",
            details={"provider": provider},
        ) from e

    logger.debug(
        "%s response status=%d body=%s",
        provider,
        resp.status_code,
        resp.text[:_LOG_BODY_CHARS],
    )

    if not resp.is_success:
        message = _upstream_message(resp)
        logger.warning(
            "%s returned %d: %s", provider, resp.status_code, message
        )
        raise CaptionServiceError(
            "Captioning service failed",
            details={
                "provider": provider,
                "upstream_status": resp.status_code,
                "upstream_error": message,
            },
        )

    try:
        return resp.json()
    except ValueError as e:
        logger.warning("%s returned non-JSON body", provider)
        raise CaptionServiceError(
            "Captioning service returned a malformed response",
            details={"provider": provider},
        ) from e
