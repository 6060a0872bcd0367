"""FastAPI application entry point."""

import time
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

# Load backend/.env into os.environ (pydantic-settings does not do this)
load_dotenv(Path(__file__).resolve().parents[2] / ".env")

from captioner.api import health, pages
from captioner.api.router import api_router
from captioner.config import get_settings
from captioner.core.exceptions import (
    CaptionerError,
    CaptionServiceError,
    ConfigurationError,
    InvalidUploadError,
    PayloadTooLargeError,
    UnsupportedMediaError,
)
from captioner.core.logging import get_logger, setup_logging
from captioner.core.tracing import get_trace_id, set_trace_id
from captioner.services.providers.registry import get_caption_provider

logger = get_logger("captioner.main")

_STATUS_BY_ERROR: dict[type[CaptionerError], int] = {
    InvalidUploadError: 400,
    PayloadTooLargeError: 413,
    UnsupportedMediaError: 415,
    ConfigurationError: 500,
    CaptionServiceError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and build the caption provider before serving."""
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        log_file=str(settings.log_file_path) if settings.log_file_path else None,
    )
    logger.info("Starting Captioner Service")
    try:
        provider = get_caption_provider()
    except ConfigurationError as e:
        logger.error("Startup aborted: %s", e.message)
        raise
    logger.info("Caption provider %s (model=%s)", type(provider).__name__, provider.model_name)
    yield
    logger.info("Shutting down Captioner Service")


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Set trace_id from X-Trace-Id header or generate one."""

    async def dispatch(self, request: Request, call_next):
        tid = set_trace_id(request.headers.get("X-Trace-Id") or None)
        response = await call_next(request)
        response.headers["X-Trace-Id"] = tid
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log incoming requests and responses with status and duration."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "?"
        logger.info("Request %s %s from %s", method, path, client)
        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "Request error %s %s after %.0fms: %s",
                method,
                path,
                duration_ms,
                exc,
            )
            raise
        duration_ms = (time.perf_counter() - start) * 1000
        status = response.status_code
        logger.info(
            "Response %s %s -> %d (%.0fms)",
            method,
            path,
            status,
            duration_ms,
        )
        if status >= 400:
            logger.warning("Request failed: %s %s -> %d", method, path, status)
        return response


def exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions and return 500 without leaking internals."""
    logger.exception("Unhandled exception: %s", exc)
    tid = get_trace_id()
    # Runs outside TraceIdMiddleware, so the header is set here.
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "trace_id": tid,
        },
        headers={"X-Trace-Id": tid},
    )


def captioner_error_handler(request: Request, exc: CaptionerError):
    """CaptionerError -> 4xx/5xx with detail."""
    status = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        400,
    )
    if status >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message, extra={"details": exc.details})
    else:
        logger.warning("%s: %s", type(exc).__name__, exc.message, extra={"details": exc.details})
    return JSONResponse(
        status_code=status,
        content={**(exc.details or {}), "detail": exc.message, "trace_id": get_trace_id()},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Captioner Service",
        description="Upload an image, get a caption from a hosted model",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(TraceIdMiddleware)  # Must run first to set trace_id for logs
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, exception_handler)
    app.add_exception_handler(CaptionerError, captioner_error_handler)

    app.include_router(pages.router)
    app.include_router(health.router)
    app.include_router(api_router, prefix="/v1")
    return app


app = create_app()
