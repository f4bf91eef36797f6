"""Client for a remote l1m proxy.

Usage:
    from l1m import L1MClient, ProviderConfig

    client = L1MClient(provider=ProviderConfig(
        url="https://api.openai.com/v1", key="sk-...", model="gpt-4o-mini",
    ))
    data = client.structured("Jane Doe is 42", {"type": "object", ...})
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from l1m.config import DEFAULT_BASE_URL
from l1m.errors import L1MClientError
from l1m.models import ProviderConfig

log = logging.getLogger(__name__)


def _is_absolute_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class L1MClient:
    """Calls ``POST {base_url}/structured`` on an l1m proxy."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        provider: Optional[ProviderConfig] = None,
        timeout: float = 60.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or os.getenv("L1M_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.provider = provider
        self.timeout = timeout
        self.http_client = http_client

    def _headers(self, provider: ProviderConfig, cache_ttl: Optional[int]) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "x-provider-model": provider.model,
            "x-provider-url": provider.url,
            "x-provider-key": provider.key,
        }
        if cache_ttl and cache_ttl > 0:
            headers["x-cache-ttl"] = str(cache_ttl)
        return headers

    def _post(self, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> httpx.Response:
        try:
            if self.http_client is not None:
                return self.http_client.post(url, headers=headers, json=body, timeout=self.timeout)
            with httpx.Client(timeout=self.timeout) as client:
                return client.post(url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            raise L1MClientError(f"request timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            raise L1MClientError(f"failed to send request: {e}") from e

    def structured(
        self,
        input: str,
        schema: Dict[str, Any],
        instruction: Optional[str] = None,
        provider: Optional[ProviderConfig] = None,
        cache_ttl: Optional[int] = None,
    ) -> Any:
        """Extract structured data through the proxy and return its ``data`` field.

        Raises:
            L1MClientError: no provider, a relative provider URL, a transport
                failure or a 4xx/5xx answer from the proxy
        """
        provider = provider or self.provider
        if provider is None:
            raise L1MClientError("No provider specified")
        if not _is_absolute_url(provider.url):
            raise L1MClientError(f"Provider URL must be an absolute URL. Got: {provider.url}")

        body: Dict[str, Any] = {"input": input, "schema": schema}
        if instruction:
            body["instruction"] = instruction

        url = f"{self.base_url}/structured"
        log.debug(f"POST {url} model={provider.model}")
        response = self._post(url, self._headers(provider, cache_ttl), body)

        if response.status_code >= 400:
            try:
                error_body = response.json()
            except ValueError:
                raise L1MClientError(
                    "Failed to parse error response",
                    status_code=response.status_code,
                    body=response.text,
                )
            message = error_body.get("message") if isinstance(error_body, dict) else None
            raise L1MClientError(
                str(message or error_body),
                status_code=response.status_code,
                body=error_body,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise L1MClientError(
                "Failed to parse response", status_code=response.status_code, body=response.text
            ) from e
        if not isinstance(payload, dict) or "data" not in payload:
            raise L1MClientError(
                "Response is missing data", status_code=response.status_code, body=payload
            )
        return payload["data"]
