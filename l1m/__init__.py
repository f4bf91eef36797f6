"""Structured data extraction from text and images with LLMs."""

__version__ = "1.0.0"

from l1m.client import L1MClient
from l1m.errors import (
    L1MClientError,
    L1MError,
    MalformedJSONError,
    NoJSONFoundError,
    ProviderError,
    ProviderMisconfiguredError,
    ProviderResponseShapeError,
    ProviderTransportError,
    ResponseParseError,
    SchemaError,
    SchemaIllegalError,
    SchemaInvalidSyntaxError,
    ValidationExhaustedError,
)
from l1m.media import VALID_TYPES, infer_type, is_base64
from l1m.models import Attempt, ExtractionParams, ExtractionResult, Prompt, ProviderConfig
from l1m.parsing import parse_json_substring
from l1m.schema import (
    collect_descriptions,
    minimal_schema,
    validate_json_schema,
    validate_result,
)
from l1m.structured import structured

__all__ = [
    "Attempt",
    "ExtractionParams",
    "ExtractionResult",
    "L1MClient",
    "L1MClientError",
    "L1MError",
    "MalformedJSONError",
    "NoJSONFoundError",
    "Prompt",
    "ProviderConfig",
    "ProviderError",
    "ProviderMisconfiguredError",
    "ProviderResponseShapeError",
    "ProviderTransportError",
    "ResponseParseError",
    "SchemaError",
    "SchemaIllegalError",
    "SchemaInvalidSyntaxError",
    "VALID_TYPES",
    "ValidationExhaustedError",
    "collect_descriptions",
    "infer_type",
    "is_base64",
    "minimal_schema",
    "parse_json_substring",
    "structured",
    "validate_json_schema",
    "validate_result",
]
