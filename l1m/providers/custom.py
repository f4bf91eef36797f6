from __future__ import annotations

from l1m.errors import L1MError, ProviderResponseShapeError, ProviderTransportError
from l1m.models import ExtractionParams, Prompt, ProviderFunc
from l1m.providers.base import AdapterKind


class FunctionAdapter:
    """Delegates generation to a caller-supplied function.

    The function receives the call's params, the rendered prompt text and the
    attempts rendered into that prompt, and returns the raw model text.
    """

    kind = AdapterKind.CUSTOM

    def __init__(self, fn: ProviderFunc, params: ExtractionParams):
        self.fn = fn
        self.params = params

    def invoke(self, prompt: Prompt) -> str:
        try:
            raw = self.fn(self.params, prompt.text, list(prompt.attempts))
        except L1MError:
            raise
        except Exception as e:
            raise ProviderTransportError(f"Custom provider failed: {e}") from e

        if not isinstance(raw, str) or not raw:
            raise ProviderResponseShapeError("Custom provider returned invalid response")
        return raw
