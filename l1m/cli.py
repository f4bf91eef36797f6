"""l1m command line.

Pipe text or base64 encoded image data in, get JSON matching a schema out::

    echo "A particularly severe crisis in 1907 led Congress to enact the Federal Reserve Act in 1913" \\
        | l1m -s '{"type":"object","properties":{"items":{"type":"array","items":{"type":"object"}}}}'

    curl -s https://public.l1m.io/menu.jpg | base64 | l1m -s '{"type":"object",...}'

Without ``--base-url`` (or ``L1M_BASE_URL``) extraction runs in-process.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import click

from l1m import __version__
from l1m.client import L1MClient
from l1m.config import load_settings
from l1m.errors import L1MError
from l1m.media import is_image_type, resolve_input_type
from l1m.models import ExtractionParams, ProviderConfig
from l1m.structured import structured

log = logging.getLogger(__name__)


def _parse_schema(raw: str) -> Dict[str, Any]:
    try:
        schema = json.loads(raw)
    except ValueError as exc:
        raise click.ClickException(f"Error parsing schema: {exc}")
    if not isinstance(schema, dict):
        raise click.ClickException("Error parsing schema: schema must be a JSON object")
    return schema


def _run_local(
    text: str,
    schema: Dict[str, Any],
    instruction: Optional[str],
    provider: ProviderConfig,
    max_attempts: int,
    timeout: float,
) -> Any:
    media_type = resolve_input_type(text)
    if is_image_type(media_type):
        text = "".join(text.split())
    log.debug(f"Running extraction in-process, input type {media_type}")
    result = structured(
        ExtractionParams(
            input=text,
            schema=schema,
            provider=provider,
            instructions=instruction,
            media_type=media_type,
            max_attempts=max_attempts,
        ),
        timeout=timeout,
    )
    return result.structured


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-s", "--schema", "schema_json", required=True, help="JSON schema for structuring the data.")
@click.option("-i", "--instruction", default=None, help="Optional instruction for the LLM.")
@click.option("--url", default=None, help="Provider URL (defaults to L1M_PROVIDER_URL).")
@click.option("--key", default=None, help="Provider API key (defaults to L1M_PROVIDER_KEY).")
@click.option("--model", default=None, help="Provider model (defaults to L1M_PROVIDER_MODEL).")
@click.option(
    "--base-url",
    default=None,
    help="l1m proxy URL (defaults to L1M_BASE_URL). When unset, extraction runs locally.",
)
@click.option(
    "--max-attempts",
    type=click.IntRange(min=1),
    default=None,
    help="Validation attempts for local extraction (defaults to L1M_MAX_ATTEMPTS or 1).",
)
@click.version_option(__version__, "--version", prog_name="l1m", message="%(prog)s version %(version)s")
def main(
    schema_json: str,
    instruction: Optional[str],
    url: Optional[str],
    key: Optional[str],
    model: Optional[str],
    base_url: Optional[str],
    max_attempts: Optional[int],
) -> None:
    """Extract structured JSON from stdin using a JSON schema."""
    try:
        settings = load_settings()
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc))
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    schema = _parse_schema(schema_json)

    url = url or settings.provider_url
    key = key or settings.provider_key
    model = model or settings.provider_model
    if not (url and key and model):
        raise click.ClickException(
            "Provider URL, key, and model must be provided via flags or environment variables"
        )
    provider = ProviderConfig(url=url, key=key, model=model)

    text = click.get_text_stream("stdin").read()
    if not text.strip():
        raise click.ClickException("No input provided on stdin")

    base_url = base_url or settings.base_url
    try:
        if base_url:
            client = L1MClient(base_url=base_url, provider=provider, timeout=settings.timeout_s)
            data = client.structured(text, schema, instruction=instruction)
        else:
            data = _run_local(
                text,
                schema,
                instruction,
                provider,
                max_attempts or settings.max_attempts,
                settings.timeout_s,
            )
    except L1MError as exc:
        raise click.ClickException(str(exc))

    click.echo(json.dumps(data, indent=2))


if __name__ == "__main__":
    main()
