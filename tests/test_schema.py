"""Tests for schema projection, descriptions and validation."""
from __future__ import annotations

import pytest

from l1m.errors import SchemaIllegalError, SchemaInvalidSyntaxError
from l1m.schema import (
    collect_descriptions,
    iter_descriptions,
    minimal_schema,
    validate_json_schema,
    validate_result,
)

PERSON_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "age": {"type": "integer"},
    },
    "required": ["name", "age"],
}


class TestMinimalSchema:
    """Tests for the prompt type sketch."""

    def test_none_is_empty(self):
        assert minimal_schema(None) == ""

    @pytest.mark.parametrize(
        "schema,expected",
        [
            ({"type": "string"}, "string"),
            ({"type": "number"}, "float"),
            ({"type": "integer"}, "float"),
            ({"type": "boolean"}, "boolean"),
            ({"type": "null"}, "any"),
            ({}, "any"),
        ],
    )
    def test_scalar_types(self, schema, expected):
        assert minimal_schema(schema) == expected

    def test_object(self):
        schema = {
            "type": "object",
            "properties": {"name": {"type": "string"}, "age": {"type": "number"}},
        }
        assert minimal_schema(schema) == "{ name: string, age: float }"

    def test_object_without_properties(self):
        assert minimal_schema({"type": "object"}) == "{}"
        assert minimal_schema({"type": "object", "properties": {}}) == "{}"

    def test_enum(self):
        schema = {"type": "string", "enum": ["red", "green", "blue"]}
        assert minimal_schema(schema) == "'red' | 'green' | 'blue'"

    def test_non_string_enum(self):
        assert minimal_schema({"enum": [1, None, True]}) == "1 | null | true"

    def test_array_of_scalars(self):
        assert minimal_schema({"type": "array", "items": {"type": "string"}}) == "string[]"
        assert minimal_schema({"type": "array", "items": {"type": "number"}}) == "float[]"

    def test_array_without_items(self):
        assert minimal_schema({"type": "array"}) == "string[]"

    def test_array_of_objects(self):
        schema = {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"sku": {"type": "string"}, "qty": {"type": "integer"}},
            },
        }
        assert minimal_schema(schema) == "[ { sku: string, qty: float } ]"

    def test_tuple_items_use_first_entry(self):
        schema = {"type": "array", "items": [{"type": "boolean"}, {"type": "string"}]}
        assert minimal_schema(schema) == "boolean[]"

    def test_nested(self):
        schema = {
            "type": "object",
            "properties": {
                "menu": {
                    "type": "object",
                    "properties": {
                        "items": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {"name": {"type": "string"}},
                            },
                        },
                    },
                },
            },
        }
        assert minimal_schema(schema) == "{ menu: { items: [ { name: string } ] } }"


class TestDescriptions:
    """Tests for description collection."""

    def test_root_and_properties(self):
        schema = {
            "type": "object",
            "description": "A person",
            "properties": {
                "name": {"type": "string", "description": "Full name"},
                "age": {"type": "integer"},
            },
        }
        assert collect_descriptions(schema) == "Root: A person\nname: Full name\n"

    def test_nested_paths(self):
        schema = {
            "type": "object",
            "properties": {
                "address": {
                    "type": "object",
                    "properties": {"city": {"type": "string", "description": "City name"}},
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string", "description": "A tag"},
                },
            },
        }
        assert list(iter_descriptions(schema)) == [
            ("address.city", "City name"),
            ("tags[]", "A tag"),
        ]

    def test_no_descriptions(self):
        assert collect_descriptions(PERSON_SCHEMA) == ""
        assert collect_descriptions(None) == ""


class TestValidateResult:
    """Tests for validation of extracted objects."""

    def test_valid(self):
        assert validate_result(PERSON_SCHEMA, {"name": "Jane", "age": 42}) == (True, [])

    def test_missing_required(self):
        ok, errors = validate_result(PERSON_SCHEMA, {"name": "Jane"})
        assert not ok
        assert errors == ["(root): 'age' is a required property"]

    def test_nested_location(self):
        schema = {
            "type": "object",
            "properties": {
                "items": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {"price": {"type": "number"}},
                    },
                },
            },
        }
        ok, errors = validate_result(schema, {"items": [{"price": 1}, {"price": "free"}]})
        assert not ok
        assert len(errors) == 1
        assert errors[0].startswith("items.1.price: ")

    def test_idempotent(self):
        data = {"name": 3}
        first = validate_result(PERSON_SCHEMA, data)
        second = validate_result(PERSON_SCHEMA, data)
        assert first == second
        assert data == {"name": 3}

    def test_invalid_schema_reported(self):
        ok, errors = validate_result({"type": "nonsense"}, {})
        assert not ok
        assert errors[0].startswith("Invalid JSON Schema: ")

    def test_non_dict_schema(self):
        ok, errors = validate_result(["not", "a", "schema"], {})
        assert not ok
        assert len(errors) == 1


class TestValidateJsonSchema:
    """Tests for the schema legality check."""

    def test_accepts_plain_schema(self):
        validate_json_schema(PERSON_SCHEMA)

    def test_rejects_ref(self):
        schema = {
            "type": "object",
            "properties": {"friend": {"$ref": "#/definitions/person"}},
        }
        with pytest.raises(SchemaIllegalError, match=r"\$ref"):
            validate_json_schema(schema)

    def test_rejects_pattern_properties_under_items(self):
        schema = {
            "type": "array",
            "items": {"type": "object", "patternProperties": {"^x": {"type": "string"}}},
        }
        with pytest.raises(SchemaIllegalError, match="patternProperties"):
            validate_json_schema(schema)

    def test_rejects_non_object(self):
        with pytest.raises(SchemaInvalidSyntaxError):
            validate_json_schema("not a schema")

    def test_rejects_metaschema_violation(self):
        with pytest.raises(SchemaInvalidSyntaxError, match="Invalid JSON Schema"):
            validate_json_schema({"type": "object", "required": "name"})


class TestBooleanSubschemas:
    """true / false are legal subschemas and must not break prompt building."""

    SCHEMA = {
        "type": "object",
        "properties": {
            "anything": True,
            "tags": {"type": "array", "items": True},
            "name": {"type": "string"},
        },
    }

    def test_accepted_by_legality_check(self):
        validate_json_schema(self.SCHEMA)

    def test_projected_as_any(self):
        assert minimal_schema(True) == "any"
        assert minimal_schema(self.SCHEMA) == "{ anything: any, tags: any[], name: string }"

    def test_descriptions_skip_them(self):
        assert collect_descriptions(self.SCHEMA) == ""

    def test_extraction_runs(self):
        from l1m.models import ExtractionParams
        from l1m.structured import structured

        result = structured(ExtractionParams(
            input="x",
            schema=self.SCHEMA,
            provider=lambda params, prompt, attempts: '{"anything": 1, "tags": [2], "name": "n"}',
        ))

        assert result.structured == {"anything": 1, "tags": [2], "name": "n"}
