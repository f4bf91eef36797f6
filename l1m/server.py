"""l1m proxy service.

Exposes the extraction engine over HTTP:

- ``POST /structured`` with ``{input | url, schema, instruction?, type?}``; the
  provider comes from the ``x-provider-url``, ``x-provider-key`` and
  ``x-provider-model`` headers, or from settings when none are sent.
  ``x-max-attempts`` is capped at ``max_attempts_limit``. A ``url`` is
  downloaded and its content-type used as the input type.
- ``GET /health``

Errors answer with ``{"message": ...}``. A failed provider call keeps
the provider's status (502 when there is none) and adds ``providerResponse``.
An unusable provider reply is a 502.
Every other engine error is a 400, including running out of attempts on
schema validation; that case is not reported as a 200 with ``{"data": null}``.

Run with ``python -m l1m.server`` or ``uvicorn l1m.server:app``.
"""
from __future__ import annotations

import base64
import logging
import time
from typing import Optional, Tuple

import httpx
from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse

from l1m.api_models import HealthResponse, StructuredRequest, StructuredResponse
from l1m.config import Settings, load_settings
from l1m.errors import (
    L1MError,
    ProviderMisconfiguredError,
    ProviderResponseShapeError,
    ProviderTransportError,
)
from l1m.media import VALID_TYPES, is_image_type, resolve_input_type
from l1m.models import ExtractionParams, ProviderConfig
from l1m.structured import structured

log = logging.getLogger(__name__)

PROVIDER_HEADERS_MESSAGE = "If any x-provider-* header is set, then all x-provider headers must be set"
FETCH_RETRIES = 2


def error_response(error: L1MError) -> JSONResponse:
    """Map an engine error onto the proxy's HTTP status and body."""
    if isinstance(error, ProviderTransportError):
        return JSONResponse(
            status_code=error.status_code or 502,
            content={
                "message": "Failed to call provider",
                "providerResponse": error.provider_response or error.message,
            },
        )
    if isinstance(error, ProviderResponseShapeError):
        return JSONResponse(status_code=502, content={"message": error.message})
    return JSONResponse(status_code=400, content={"message": error.message})


def _header_provider(
    url: Optional[str], key: Optional[str], model: Optional[str]
) -> Optional[ProviderConfig]:
    values = [url, key, model]
    if not any(values):
        return None
    if not all(values):
        raise ProviderMisconfiguredError(PROVIDER_HEADERS_MESSAGE)
    return ProviderConfig(url=url, key=key, model=model)


def fetch_url_content(url: str, timeout: float) -> Tuple[str, Optional[str]]:
    """Download ``url`` for extraction.

    Images are returned base64 encoded and anything else as text, together
    with the content-type stripped of its parameters. Failed downloads are
    retried ``FETCH_RETRIES`` times.

    Raises:
        httpx.HTTPError: every try failed
        httpx.InvalidURL: ``url`` cannot be requested
    """
    for attempt in range(FETCH_RETRIES + 1):
        try:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                response = client.get(url)
                response.raise_for_status()
            break
        except httpx.HTTPError as e:
            log.warning(f"Fetching {url} failed (try {attempt + 1}/{FETCH_RETRIES + 1}): {e}")
            if attempt == FETCH_RETRIES:
                raise

    content_type = response.headers.get("content-type")
    media_type = content_type.split(";")[0].strip().lower() if content_type else None
    if is_image_type(media_type):
        return base64.b64encode(response.content).decode("ascii"), media_type
    return response.text, media_type


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings, loaded from file and environment when omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    app = FastAPI(
        title="l1m",
        description="Structured data extraction from text and images",
        version="1.0.0",
    )
    started = time.time()

    if settings.default_provider() is None:
        log.warning("No default provider configured, x-provider-* headers are required")

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        """Health check endpoint."""
        now = time.time()
        return HealthResponse(status="ok", timestamp=int(now * 1000), uptime=now - started)

    @app.post("/structured", response_model=StructuredResponse)
    def extract(
        req: StructuredRequest,
        x_provider_url: Optional[str] = Header(default=None),
        x_provider_key: Optional[str] = Header(default=None),
        x_provider_model: Optional[str] = Header(default=None),
        x_max_attempts: Optional[int] = Header(default=None),
    ):
        """Extract an object matching ``req.schema`` from ``req.input`` or ``req.url``."""
        content, declared_type = req.input, req.type
        if req.url is not None:
            try:
                content, fetched_type = fetch_url_content(req.url, settings.timeout_s)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                log.error(f"Failed to fetch url contents: {e}")
                return JSONResponse(status_code=400, content={"message": "Failed to fetch url contents"})
            declared_type = fetched_type or declared_type

        media_type = resolve_input_type(content, declared_type)
        if media_type not in VALID_TYPES:
            log.warning(f"Invalid mime type: {media_type}")
            return JSONResponse(
                status_code=400,
                content={"message": "Provided content has invalid mime type", "type": media_type},
            )

        try:
            provider = _header_provider(x_provider_url, x_provider_key, x_provider_model)
            provider = provider or settings.default_provider()
            if provider is None:
                raise ProviderMisconfiguredError("No provider configured")

            log.info(
                f"structured: schema_type={req.json_schema.get('type')} "
                f"type={media_type} content_length={len(content)}"
            )
            start = time.perf_counter()
            result = structured(
                ExtractionParams(
                    input=content,
                    schema=req.json_schema,
                    provider=provider,
                    instructions=req.instruction,
                    media_type=media_type,
                    max_attempts=min(
                        x_max_attempts or settings.max_attempts, settings.max_attempts_limit
                    ),
                ),
                timeout=settings.timeout_s,
            )
        except L1MError as e:
            log.error(f"structured failed: {e}")
            return error_response(e)

        duration_ms = (time.perf_counter() - start) * 1000
        log.info(f"structured_success duration_ms={duration_ms:.2f}")
        return StructuredResponse(data=result.structured)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
