"""Shared pieces of the provider adapters.

Adapters are plain classes that satisfy the :class:`Adapter` protocol; which
one handles a call is decided once, up front, from :class:`AdapterKind`.
"""
from __future__ import annotations

import enum
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from l1m.errors import ProviderResponseShapeError, ProviderTransportError
from l1m.models import Prompt

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0
TEMPERATURE = 0.2


class AdapterKind(str, enum.Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    CUSTOM = "custom"


class Adapter(Protocol):
    kind: AdapterKind

    def invoke(self, prompt: Prompt) -> str:
        """Send ``prompt`` to the backend and return the generated text.

        Raises:
            ProviderTransportError: network failure, timeout or non-2xx status
            ProviderResponseShapeError: the response lacks the text field
        """
        ...


def _error_message(body: Any) -> Optional[str]:
    """Pull a human readable message out of a provider error envelope."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    if isinstance(body, str) and body.strip():
        return body.strip()
    return None


def _status_error(error: httpx.HTTPStatusError, provider: str) -> ProviderTransportError:
    response = error.response
    status_code = response.status_code
    try:
        body: Any = response.json()
    except ValueError:
        body = response.text

    message = _error_message(body) or str(error)
    log.warning(f"{provider} returned HTTP {status_code}: {message}")
    return ProviderTransportError(
        f"{provider} API error ({status_code}): {message}",
        status_code=status_code,
        provider_response=body,
    )


def post_json(
    url: str,
    payload: Dict[str, Any],
    *,
    provider: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT_S,
    http_client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    """POST ``payload`` as JSON and return the decoded JSON object.

    Uses ``http_client`` when given (a pooled client shared across calls),
    otherwise a short-lived client per request.
    """
    request_headers = {"Content-Type": "application/json", **(headers or {})}
    log.debug(f"{provider} request: model={payload.get('model')}")

    try:
        if http_client is not None:
            response = http_client.post(
                url, headers=request_headers, params=params, json=payload, timeout=timeout
            )
        else:
            with httpx.Client(timeout=timeout) as client:
                response = client.post(url, headers=request_headers, params=params, json=payload)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise _status_error(e, provider) from e
    except httpx.TimeoutException as e:
        raise ProviderTransportError(f"{provider} request timed out after {timeout}s") from e
    except httpx.RequestError as e:
        raise ProviderTransportError(f"{provider} request failed: {e}") from e

    try:
        body = response.json()
    except ValueError as e:
        raise ProviderResponseShapeError(f"{provider} returned a non-JSON response") from e

    if not isinstance(body, dict):
        raise ProviderResponseShapeError(
            f"{provider} returned an unexpected response", provider_response=body
        )
    return body
