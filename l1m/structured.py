"""Structured extraction loop.

Usage:
    from l1m import ExtractionParams, ProviderConfig, structured

    result = structured(ExtractionParams(
        input="Jane Doe is 42 years old.",
        schema={
            "type": "object",
            "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
            "required": ["name", "age"],
        },
        provider=ProviderConfig(url="https://api.openai.com/v1", key="sk-...", model="gpt-4o-mini"),
        max_attempts=3,
    ))
    result.structured  # {"name": "Jane Doe", "age": 42}

Each attempt prompts the provider, pulls a JSON object out of the reply and
validates it against the schema. Validation failures are fed back into the
next prompt until ``max_attempts`` is used up; provider and parse failures end
the call at once.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import httpx

from l1m.errors import ResponseParseError, ValidationExhaustedError
from l1m.models import Attempt, ExtractionParams, ExtractionResult, Prompt
from l1m.parsing import parse_json_substring
from l1m.providers import resolve_adapter
from l1m.providers.base import DEFAULT_TIMEOUT_S
from l1m.schema import (
    collect_descriptions,
    minimal_schema,
    validate_json_schema,
    validate_result,
)

log = logging.getLogger(__name__)

# Older attempts still count toward max_attempts but are left out of the prompt.
ATTEMPT_WINDOW = 2
ERROR_SEPARATOR = "; "


def schema_prompt(schema) -> str:
    return (
        "Answer in JSON using this schema:\n"
        f"{minimal_schema(schema)}\n"
        f"{collect_descriptions(schema)}"
    )


def build_prompt(
    params: ExtractionParams,
    schema_block: str,
    previous_attempts: Sequence[Attempt] = (),
) -> Prompt:
    sections: List[str] = []
    if params.instructions:
        sections.append(params.instructions)
    if not params.is_image:
        sections.append(params.input)
    sections.append(schema_block)
    text = "\n\n".join(sections)

    if previous_attempts:
        text += "\n\nPrevious attempts failed with these errors:"
        for i, attempt in enumerate(previous_attempts, start=1):
            text += f"\n\nAttempt {i}:\n{attempt.raw}\nErrors: {attempt.errors}"
        text += "\n\nPlease fix the errors and try again."

    if params.is_image:
        return Prompt(
            text=text,
            image_data=params.input,
            image_type=params.media_type,
            attempts=tuple(previous_attempts),
        )
    return Prompt(text=text, attempts=tuple(previous_attempts))


def structured(
    params: ExtractionParams,
    *,
    timeout: float = DEFAULT_TIMEOUT_S,
    http_client: Optional[httpx.Client] = None,
) -> ExtractionResult:
    """Extract an object matching ``params.schema`` from ``params.input``.

    Args:
        params: Input, schema, provider and attempt budget
        timeout: Per provider call timeout in seconds
        http_client: Optional pooled client reused across provider calls

    Returns:
        ExtractionResult with the raw reply and the validated object

    Raises:
        SchemaIllegalError, SchemaInvalidSyntaxError: unusable schema
        ProviderError: provider misconfigured, unreachable or malformed reply
        ResponseParseError: no parseable JSON object in the reply
        ValidationExhaustedError: still invalid after ``max_attempts``
    """
    validate_json_schema(params.schema)
    adapter = resolve_adapter(params, timeout=timeout, http_client=http_client)

    max_attempts = params.max_attempts if params.max_attempts > 0 else 1
    schema_block = schema_prompt(params.schema)
    attempts: List[Attempt] = []
    result: Optional[ExtractionResult] = None

    for n in range(max_attempts):
        prompt = build_prompt(params, schema_block, attempts[-ATTEMPT_WINDOW:])
        log.debug(f"Attempt {n + 1}/{max_attempts} via {adapter.kind.value}")

        raw = adapter.invoke(prompt)
        try:
            candidate = parse_json_substring(raw)
        except ResponseParseError as e:
            e.result = ExtractionResult(raw=raw, structured=None)
            log.warning(f"Attempt {n + 1}/{max_attempts}: {e}")
            raise

        result = ExtractionResult(raw=raw, structured=candidate)
        ok, messages = validate_result(params.schema, candidate)
        if ok:
            return result

        errors = ERROR_SEPARATOR.join(messages)
        attempts.append(Attempt(raw=raw, errors=errors))
        log.info(f"Attempt {n + 1}/{max_attempts} failed validation: {errors}")

    log.warning(f"Validation failed after {max_attempts} attempt(s)")
    raise ValidationExhaustedError(
        f"validation failed: {attempts[-1].errors}",
        result=result,
        attempts=attempts,
    )
