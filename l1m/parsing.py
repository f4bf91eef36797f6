"""Recovery of the JSON object embedded in raw model output."""
from __future__ import annotations

import json
import re
from typing import Any, Dict

from l1m.errors import MalformedJSONError, NoJSONFoundError

# Greedy: first "{" through last "}", across lines.
_JSON_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def parse_json_substring(raw: str) -> Dict[str, Any]:
    """Recover the JSON object embedded in free-form model output.

    The object may be surrounded by prose or code fences. If the span does not
    parse as-is, raw newlines are flattened to spaces and parsing is retried
    once.

    Raises:
        NoJSONFoundError: no ``{...}`` span in ``raw``.
        MalformedJSONError: the span is not valid JSON even after repair.
    """
    match = _JSON_SPAN.search(raw or "")
    if not match:
        raise NoJSONFoundError("no JSON object found in the response")

    candidate = match.group(0)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    cleaned = candidate.replace("\r", "").replace("\n", " ")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedJSONError(f"failed to parse JSON: {e}") from e
