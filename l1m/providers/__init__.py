"""Provider adapters.

A call's provider is either a :class:`~l1m.models.ProviderConfig` or a plain
function. :func:`resolve_adapter` turns it into exactly one adapter before the
first attempt:

- url containing ``generativelanguage.googleapis.com`` -> Google
- url containing ``anthropic.com`` -> Anthropic
- any other url -> OpenAI-compatible chat completions
- a callable -> :class:`FunctionAdapter`
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from l1m.errors import ProviderMisconfiguredError
from l1m.models import ExtractionParams, ProviderConfig
from l1m.providers.anthropic import ANTHROPIC_HOST, AnthropicAdapter
from l1m.providers.base import DEFAULT_TIMEOUT_S, Adapter, AdapterKind, post_json
from l1m.providers.custom import FunctionAdapter
from l1m.providers.gemini import GOOGLE_HOST, GoogleAdapter
from l1m.providers.openai import OpenAIAdapter

_WIRE_ADAPTERS = {
    AdapterKind.OPENAI: OpenAIAdapter,
    AdapterKind.ANTHROPIC: AnthropicAdapter,
    AdapterKind.GOOGLE: GoogleAdapter,
}


def adapter_kind_for(provider: Any) -> AdapterKind:
    if isinstance(provider, ProviderConfig):
        if GOOGLE_HOST in provider.url:
            return AdapterKind.GOOGLE
        if ANTHROPIC_HOST in provider.url:
            return AdapterKind.ANTHROPIC
        return AdapterKind.OPENAI
    if callable(provider):
        return AdapterKind.CUSTOM
    raise ProviderMisconfiguredError("invalid provider configuration")


def _check_config(config: ProviderConfig) -> None:
    missing = [name for name in ("url", "key", "model") if not getattr(config, name)]
    if missing:
        raise ProviderMisconfiguredError(
            f"provider configuration is missing: {', '.join(missing)}"
        )


def resolve_adapter(
    params: ExtractionParams,
    *,
    timeout: float = DEFAULT_TIMEOUT_S,
    http_client: Optional[httpx.Client] = None,
) -> Adapter:
    kind = adapter_kind_for(params.provider)
    if kind is AdapterKind.CUSTOM:
        return FunctionAdapter(params.provider, params)

    _check_config(params.provider)
    return _WIRE_ADAPTERS[kind](params.provider, timeout=timeout, http_client=http_client)


__all__ = [
    "Adapter",
    "AdapterKind",
    "AnthropicAdapter",
    "FunctionAdapter",
    "GoogleAdapter",
    "OpenAIAdapter",
    "adapter_kind_for",
    "post_json",
    "resolve_adapter",
]
