"""OpenAI-compatible chat completion adapter.

Also serves any backend that speaks the same wire format (OpenRouter, Groq,
local servers behind ``/v1/chat/completions``).
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from l1m.errors import ProviderResponseShapeError
from l1m.models import Prompt, ProviderConfig
from l1m.providers.base import DEFAULT_TIMEOUT_S, TEMPERATURE, AdapterKind, post_json

CHAT_COMPLETIONS_PATH = "/chat/completions"


def chat_completions_url(base_url: str) -> str:
    url = base_url.rstrip("/")
    if not url.endswith(CHAT_COMPLETIONS_PATH):
        url = f"{url}{CHAT_COMPLETIONS_PATH}"
    return url


class OpenAIAdapter:
    kind = AdapterKind.OPENAI

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = DEFAULT_TIMEOUT_S,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        self.endpoint = chat_completions_url(config.url)
        self.timeout = timeout
        self.http_client = http_client

    def build_payload(self, prompt: Prompt) -> Dict[str, Any]:
        content: Any = prompt.text
        if prompt.has_image:
            content = [
                {"type": "text", "text": prompt.text},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{prompt.image_type};base64,{prompt.image_data}"},
                },
            ]

        messages: List[Dict[str, Any]] = [{"role": "user", "content": content}]
        return {
            "model": self.config.model,
            "temperature": TEMPERATURE,
            "messages": messages,
        }

    def parse_response(self, body: Dict[str, Any]) -> str:
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ProviderResponseShapeError("no choices in response", provider_response=body)

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content:
            raise ProviderResponseShapeError(
                "OpenAI API returned invalid response", provider_response=body
            )
        return content

    def invoke(self, prompt: Prompt) -> str:
        body = post_json(
            self.endpoint,
            self.build_payload(prompt),
            provider="openai",
            headers={"Authorization": f"Bearer {self.config.key}"},
            timeout=self.timeout,
            http_client=self.http_client,
        )
        return self.parse_response(body)
