"""JSON Schema helpers: prompt projection, descriptions and validation.

Prompts carry a short type sketch such as ``{ name: string, tags: string[] }``
instead of the schema document; the full schema is only used to validate what
comes back.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import SchemaError as JSONSchemaError
from jsonschema.exceptions import UnknownType
from jsonschema.validators import validator_for

from l1m.errors import SchemaIllegalError, SchemaInvalidSyntaxError

log = logging.getLogger(__name__)

ILLEGAL_KEYS = ("$ref", "patternProperties")


def _first_item(items: Any) -> Optional[Dict[str, Any]]:
    # tuple-style "items": [...] is reduced to its first entry
    if isinstance(items, list):
        items = items[0] if items else None
    return items if isinstance(items, dict) else None


def _format_enum_value(value: Any) -> str:
    if isinstance(value, str):
        return f"'{value}'"
    return json.dumps(value)


def minimal_schema(schema: Optional[Dict[str, Any]]) -> str:
    """Build a compact type sketch of ``schema`` for use in prompts."""
    if schema is None:
        return ""
    # boolean subschemas (true / false) constrain nothing we can sketch
    if not isinstance(schema, dict):
        return "any"

    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return " | ".join(_format_enum_value(v) for v in enum)

    schema_type = schema.get("type")
    if schema_type == "string":
        return "string"
    if schema_type in ("number", "integer"):
        return "float"
    if schema_type == "boolean":
        return "boolean"

    if schema_type == "array":
        items = schema.get("items")
        if isinstance(items, bool):
            return "any[]"
        item = _first_item(items)
        if item is None:
            return "string[]"
        item_type = minimal_schema(item)
        if item.get("type") == "object" and item.get("properties") is not None:
            return f"[ {item_type} ]"
        return f"{item_type}[]"

    if schema_type == "object":
        properties = schema.get("properties")
        if not isinstance(properties, dict) or not properties:
            return "{}"
        fields = ", ".join(
            f"{name}: {minimal_schema(prop)}" for name, prop in properties.items()
        )
        return f"{{ {fields} }}"

    return "any"


def iter_descriptions(
    schema: Optional[Dict[str, Any]], path: str = ""
) -> Iterator[Tuple[str, str]]:
    """Yield ``(label, description)`` pairs in pre-order."""
    if not isinstance(schema, dict):
        return

    description = schema.get("description")
    if isinstance(description, str) and description:
        yield ("Root" if not path else path), description

    schema_type = schema.get("type")
    if schema_type == "object":
        properties = schema.get("properties")
        if isinstance(properties, dict):
            for name, prop in properties.items():
                child = f"{path}.{name}" if path else name
                yield from iter_descriptions(prop, child)
    elif schema_type == "array":
        item = _first_item(schema.get("items"))
        if item is not None:
            yield from iter_descriptions(item, f"{path}[]")


def collect_descriptions(schema: Optional[Dict[str, Any]], path: str = "") -> str:
    """Render field descriptions as ``<path>: <description>`` lines."""
    return "".join(f"{label}: {text}\n" for label, text in iter_descriptions(schema, path))


def _validator_class(schema: Dict[str, Any]):
    return validator_for(schema, default=Draft202012Validator)


def _error_location(error) -> str:
    if not error.absolute_path:
        return "(root)"
    return ".".join(str(p) for p in error.absolute_path)


def validate_result(schema: Dict[str, Any], data: Any) -> Tuple[bool, List[str]]:
    """Validate ``data`` against ``schema``.

    Returns ``(ok, messages)``; ``messages`` is empty iff ``ok``.
    """
    if not isinstance(schema, dict):
        return False, ["Invalid JSON Schema: schema must be a JSON object"]

    try:
        cls = _validator_class(schema)
        cls.check_schema(schema)
        validator = cls(schema, format_checker=FormatChecker())
        errors = sorted(
            validator.iter_errors(data),
            key=lambda e: [str(p) for p in e.absolute_path],
        )
    except (JSONSchemaError, UnknownType) as e:
        log.warning(f"Schema could not be used for validation: {e}")
        return False, [f"Invalid JSON Schema: {getattr(e, 'message', str(e))}"]

    if not errors:
        return True, []
    return False, [f"{_error_location(e)}: {e.message}" for e in errors]


def _illegal_schema_check(schema: Dict[str, Any]) -> Optional[str]:
    for key in ILLEGAL_KEYS:
        if key in schema:
            return f"Schema contains {key} which is not supported"

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for prop in properties.values():
            if isinstance(prop, dict):
                error = _illegal_schema_check(prop)
                if error:
                    return error

    items = schema.get("items")
    for item in items if isinstance(items, list) else [items]:
        if isinstance(item, dict):
            error = _illegal_schema_check(item)
            if error:
                return error

    return None


def validate_json_schema(schema: Any) -> None:
    """Reject schemas the engine cannot work with.

    Raises:
        SchemaIllegalError: ``$ref`` or ``patternProperties`` found anywhere
            under ``properties`` / ``items``.
        SchemaInvalidSyntaxError: not a JSON object, or fails the metaschema.
    """
    if not isinstance(schema, dict):
        raise SchemaInvalidSyntaxError("Provided JSON schema is invalid")

    illegal = _illegal_schema_check(schema)
    if illegal:
        raise SchemaIllegalError(illegal)

    try:
        _validator_class(schema).check_schema(schema)
    except JSONSchemaError as e:
        raise SchemaInvalidSyntaxError(f"Invalid JSON Schema: {e.message}") from e
