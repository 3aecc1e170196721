"""
Unit tests for toolplan/planning/schema_examples.py - SchemaExampleSynthesizer.
"""

import pytest

from toolplan.planning.schema_examples import (
    EXAMPLE_STRING,
    EXAMPLE_UUID,
    SchemaExampleSynthesizer,
    synthesize_example,
)


@pytest.fixture
def synth() -> SchemaExampleSynthesizer:
    return SchemaExampleSynthesizer()


class TestJsonSchemaDialect:
    """JSON Schema nodes."""

    def test_order_with_items(self, synth):
        """Objects list every field; arrays hold exactly one synthesized element."""
        shape = {
            "type": "object",
            "properties": {
                "orderId": {"type": "string"},
                "items": {
                    "type": "array",
                    "items": {"type": "object", "properties": {"sku": {"type": "string"}}},
                },
            },
            "required": ["orderId"],
        }

        example = synth.synthesize(shape)

        assert set(example.keys()) == {"orderId", "items"}
        assert isinstance(example["items"], list)
        assert len(example["items"]) == 1
        assert set(example["items"][0].keys()) == {"sku"}

    def test_scalars(self, synth):
        shape = {
            "type": "object",
            "properties": {
                "count": {"type": "integer"},
                "price": {"type": "number"},
                "gift": {"type": "boolean"},
                "note": {"type": "null"},
            },
        }
        assert synth.synthesize(shape) == {"count": 0, "price": 0, "gift": False, "note": None}

    def test_string_uses_field_name(self, synth):
        shape = {"type": "object", "properties": {"orderId": {"type": "string"}}}
        assert synth.synthesize(shape) == {"orderId": "example_orderid"}

    def test_bare_string(self, synth):
        assert synth.synthesize({"type": "string"}) == EXAMPLE_STRING

    @pytest.mark.parametrize(
        "fmt,expected",
        [
            ("email", "user@example.com"),
            ("uri", "https://example.com"),
            ("uuid", EXAMPLE_UUID),
        ],
    )
    def test_string_formats(self, synth, fmt, expected):
        assert synth.synthesize({"type": "string", "format": fmt}) == expected

    def test_enum_first_value(self, synth):
        assert synth.synthesize({"type": "string", "enum": ["open", "closed"]}) == "open"

    def test_const(self, synth):
        assert synth.synthesize({"const": 42}) == 42

    def test_nullable_type_list(self, synth):
        assert synth.synthesize({"type": ["null", "integer"]}) == 0

    def test_any_of_prefers_simple_option(self, synth):
        shape = {"anyOf": [{"type": "array", "items": {"type": "string"}}, {"type": "string"}]}
        assert synth.synthesize(shape) == EXAMPLE_STRING

    def test_all_of_merges_objects(self, synth):
        shape = {
            "allOf": [
                {"type": "object", "properties": {"a": {"type": "integer"}}},
                {"type": "object", "properties": {"b": {"type": "boolean"}}},
            ]
        }
        assert synth.synthesize(shape) == {"a": 0, "b": False}

    def test_properties_without_type_is_object(self, synth):
        assert synth.synthesize({"properties": {"x": {"type": "integer"}}}) == {"x": 0}

    def test_tuple_items(self, synth):
        shape = {"type": "array", "items": [{"type": "integer"}, {"type": "boolean"}]}
        assert synth.synthesize(shape) == [0, False]


class TestZodDialect:
    """Zod exports as stored by the dashboard."""

    def test_zod_object(self, synth):
        shape = {
            "typeName": "ZodObject",
            "shape": {
                "email": {"typeName": "ZodString", "checks": [{"kind": "email"}]},
                "limit": {"typeName": "ZodOptional", "innerType": {"typeName": "ZodNumber"}},
                "active": {"typeName": "ZodBoolean"},
                "status": {"typeName": "ZodEnum", "options": ["pending", "shipped"]},
                "tags": {"typeName": "ZodArray", "type": {"typeName": "ZodString"}},
            },
        }
        assert synth.synthesize(shape) == {
            "email": "user@example.com",
            "limit": 0,
            "active": False,
            "status": "pending",
            "tags": ["example_tags"],
        }

    def test_described_string(self, synth):
        shape = {"typeName": "ZodString", "description": "Order Number"}
        assert synth.synthesize(shape) == "string_value_for_order_number"

    def test_literal(self, synth):
        assert synth.synthesize({"typeName": "ZodLiteral", "value": "v1"}) == "v1"

    def test_union_prefers_string(self, synth):
        shape = {
            "typeName": "ZodUnion",
            "options": [{"typeName": "ZodNull"}, {"typeName": "ZodString"}],
        }
        assert synth.synthesize(shape) == EXAMPLE_STRING

    def test_record(self, synth):
        shape = {"typeName": "ZodRecord", "valueType": {"typeName": "ZodNumber"}}
        assert synth.synthesize(shape) == {"example_key": 0}

    def test_native_enum_prefers_string_values(self, synth):
        shape = {"typeName": "ZodNativeEnum", "enum": {"0": 0, "Red": "RED"}}
        assert synth.synthesize(shape) == "RED"

    def test_unknown_type_name(self, synth):
        assert synth.synthesize({"typeName": "ZodMystery"}) is None


class TestTotality:
    """synthesize() never raises."""

    @pytest.mark.parametrize(
        "shape",
        [
            None,
            "string",
            42,
            [],
            {},
            {"type": "weird"},
            {"typeName": "ZodObject", "shape": 5},
            {"typeName": ["ZodString"]},
            {"typeName": "ZodUnion", "options": 7},
            {"typeName": "ZodObject", "shape": {"a": {"typeName": "ZodString", "checks": 5}}},
        ],
    )
    def test_malformed_input(self, synth, shape):
        result = synth.synthesize(shape)
        assert result is None or result == {} or result == {"a": "example_a"}

    @pytest.mark.parametrize(
        "checks",
        [5, True, {"kind": "email"}, [{"kind": ["email"]}, "min", None, {"kind": {"x": 1}}]],
    )
    def test_malformed_string_checks(self, synth, checks):
        assert synth.synthesize({"typeName": "ZodString", "checks": checks}) == EXAMPLE_STRING

    def test_non_string_property_key(self, synth):
        shape = {"type": "object", "properties": {1: {"type": "string"}}}
        assert synth.synthesize(shape) == {1: EXAMPLE_STRING}

    def test_depth_cap_emits_null(self):
        shape: dict = {"type": "string"}
        for _ in range(10):
            shape = {"type": "object", "properties": {"child": shape}}

        example = SchemaExampleSynthesizer(max_depth=3).synthesize(shape)

        leaf = example
        depth = 0
        while isinstance(leaf, dict):
            leaf = leaf["child"]
            depth += 1
        assert leaf is None
        assert depth == 4

    def test_self_referential_schema(self, synth):
        node: dict = {"type": "object", "properties": {}}
        node["properties"]["self"] = node
        assert isinstance(synth.synthesize(node), dict)


class TestArgumentNames:
    def test_top_level_keys(self, synth):
        shape = {
            "type": "object",
            "properties": {"customerId": {"type": "string"}, "limit": {"type": "integer"}},
        }
        assert synth.argument_names(shape) == ["customerId", "limit"]

    def test_non_object_has_no_names(self, synth):
        assert synth.argument_names({"type": "string"}) == []
        assert synth.argument_names(None) == []

    def test_module_shortcut(self):
        assert synthesize_example({"type": "boolean"}) == False  # noqa: E712
