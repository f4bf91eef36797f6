"""Google Generative Language (Gemini) adapter."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from l1m.errors import ProviderResponseShapeError
from l1m.models import Prompt, ProviderConfig
from l1m.providers.base import DEFAULT_TIMEOUT_S, TEMPERATURE, AdapterKind, post_json

GOOGLE_HOST = "generativelanguage.googleapis.com"
API_VERSION = "v1beta"


def generate_content_url(base_url: str, model: str) -> str:
    url = base_url.rstrip("/")
    if url.endswith(f"/{API_VERSION}"):
        url = url[: -len(API_VERSION) - 1]
    return f"{url}/{API_VERSION}/models/{model}:generateContent"


class GoogleAdapter:
    kind = AdapterKind.GOOGLE

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = DEFAULT_TIMEOUT_S,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        self.endpoint = generate_content_url(config.url, config.model)
        self.timeout = timeout
        self.http_client = http_client

    def build_payload(self, prompt: Prompt) -> Dict[str, Any]:
        parts: List[Dict[str, Any]] = [{"text": prompt.text}]
        if prompt.has_image:
            parts.append({
                "inline_data": {
                    "mime_type": prompt.image_type,
                    "data": prompt.image_data,
                },
            })

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": TEMPERATURE},
        }

    def parse_response(self, body: Dict[str, Any]) -> str:
        candidates = body.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            block_reason = (body.get("promptFeedback") or {}).get("blockReason")
            if block_reason:
                raise ProviderResponseShapeError(
                    f"Content blocked: {block_reason}", provider_response=body
                )
            raise ProviderResponseShapeError("no candidates in response", provider_response=body)

        try:
            text = candidates[0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderResponseShapeError(
                "Google API returned invalid response", provider_response=body
            ) from e

        if not isinstance(text, str) or not text:
            raise ProviderResponseShapeError(
                "Google API returned invalid response", provider_response=body
            )
        return text

    def invoke(self, prompt: Prompt) -> str:
        body = post_json(
            self.endpoint,
            self.build_payload(prompt),
            provider="google",
            params={"key": self.config.key},
            timeout=self.timeout,
            http_client=self.http_client,
        )
        return self.parse_response(body)
