"""Anthropic messages API adapter."""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from l1m.errors import ProviderResponseShapeError
from l1m.models import Prompt, ProviderConfig
from l1m.providers.base import DEFAULT_TIMEOUT_S, TEMPERATURE, AdapterKind, post_json

ANTHROPIC_HOST = "anthropic.com"
ANTHROPIC_API_VERSION = "2023-06-01"
MAX_TOKENS = 1024


def messages_url(base_url: str) -> str:
    url = base_url.rstrip("/")
    if url.endswith("/messages"):
        return url
    if url.endswith("/v1"):
        return f"{url}/messages"
    return f"{url}/v1/messages"


class AnthropicAdapter:
    kind = AdapterKind.ANTHROPIC

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = DEFAULT_TIMEOUT_S,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        self.endpoint = messages_url(config.url)
        self.timeout = timeout
        self.http_client = http_client

    def build_payload(self, prompt: Prompt) -> Dict[str, Any]:
        content: Any = prompt.text
        if prompt.has_image:
            content = [
                {"type": "text", "text": prompt.text},
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": prompt.image_type,
                        "data": prompt.image_data,
                    },
                },
            ]

        return {
            "model": self.config.model,
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
            "messages": [{"role": "user", "content": content}],
        }

    def parse_response(self, body: Dict[str, Any]) -> str:
        blocks = body.get("content")
        if not isinstance(blocks, list) or not blocks:
            raise ProviderResponseShapeError("no content in response", provider_response=body)

        text = "".join(
            block["text"]
            for block in blocks
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        )
        if not text:
            raise ProviderResponseShapeError(
                "Anthropic API returned invalid response", provider_response=body
            )
        return text

    def invoke(self, prompt: Prompt) -> str:
        body = post_json(
            self.endpoint,
            self.build_payload(prompt),
            provider="anthropic",
            headers={
                "x-api-key": self.config.key,
                "anthropic-version": ANTHROPIC_API_VERSION,
            },
            timeout=self.timeout,
            http_client=self.http_client,
        )
        return self.parse_response(body)
