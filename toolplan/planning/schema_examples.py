"""
Schema Example Synthesizer

Turns a tool's argument-shape description into a representative example
value. The example is shown to the planner so it can see every field name a
tool accepts, and its top-level keys become the tool's "allowed argument
names".

Two schema dialects are understood:
- JSON Schema ("type", "properties", "items", "enum", ...)
- Zod exports as stored by the dashboard ("typeName": "ZodObject", "shape", ...)

synthesize() is total: malformed or unknown nodes produce None instead of
raising, and recursion stops at a depth cap so self-referential schemas
cannot loop.

Pattern: Recursive descent over a tagged tree
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 6

EXAMPLE_STRING = "example_string"
EXAMPLE_UUID = "a1b2c3d4-e5f6-7890-1234-567890abcdef"

_STRING_FORMATS = {
    "email": "user@example.com",
    "url": "https://example.com",
    "uri": "https://example.com",
    "uuid": EXAMPLE_UUID,
    "date": "2024-01-01",
}

# Union options tried in this order; simple kinds first
_PREFERRED_JSON_TYPES = ("string", "number", "integer", "boolean", "object", "array")
_PREFERRED_ZOD_TYPES = (
    "ZodString",
    "ZodNumber",
    "ZodBoolean",
    "ZodLiteral",
    "ZodEnum",
    "ZodObject",
    "ZodArray",
)


class SchemaExampleSynthesizer:
    """
    Builds example payloads from schema descriptions.

    Attributes:
        max_depth: Nesting level beyond which None is emitted.

    Example:
        >>> synth = SchemaExampleSynthesizer()
        >>> synth.synthesize({
        ...     "type": "object",
        ...     "properties": {"orderId": {"type": "string"}},
        ... })
        {'orderId': 'example_orderid'}
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth

    # =========================================================================
    # Public API
    # =========================================================================

    def synthesize(self, shape: Any) -> Any:
        """
        Synthesize an example value for a schema.

        Args:
            shape: Schema dict in either dialect. Anything else yields None.

        Returns:
            A JSON-compatible example value.
        """
        if not isinstance(shape, dict):
            return None
        try:
            return self._node(shape, depth=0, field_name=None)
        except RecursionError:
            logger.warning("Schema nesting too deep, emitting null example")
            return None

    def argument_names(self, shape: Any) -> list[str]:
        """
        Top-level field names of the synthesized example.

        Returns an empty list when the schema does not describe an object.
        """
        example = self.synthesize(shape)
        if isinstance(example, dict):
            return list(example.keys())
        return []

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _node(self, node: Any, depth: int, field_name: Optional[str]) -> Any:
        if depth > self.max_depth:
            return None
        if not isinstance(node, dict):
            # Zod literals sometimes inline the primitive value itself
            return node if isinstance(node, (str, int, float, bool)) else None

        if "typeName" in node:
            return self._zod_node(node, depth, field_name)
        return self._json_schema_node(node, depth, field_name)

    # =========================================================================
    # JSON Schema dialect
    # =========================================================================

    def _json_schema_node(
        self, node: dict[str, Any], depth: int, field_name: Optional[str]
    ) -> Any:
        if "const" in node:
            return node["const"]

        enum_values = node.get("enum")
        if isinstance(enum_values, list):
            return enum_values[0] if enum_values else None

        examples = node.get("examples")
        if isinstance(examples, list) and examples:
            return examples[0]

        for key in ("anyOf", "oneOf"):
            options = node.get(key)
            if isinstance(options, list) and options:
                return self._node(self._pick_json_option(options), depth + 1, field_name)

        all_of = node.get("allOf")
        if isinstance(all_of, list) and all_of:
            return self._merge_all_of(all_of, depth, field_name)

        schema_type = node.get("type")
        if isinstance(schema_type, list):
            non_null = [t for t in schema_type if t != "null"]
            schema_type = non_null[0] if non_null else "null"
        if schema_type is None and isinstance(node.get("properties"), dict):
            schema_type = "object"
        if schema_type is None and "items" in node:
            schema_type = "array"

        if schema_type == "object":
            return self._json_object(node, depth)
        if schema_type == "array":
            items = node.get("items")
            if isinstance(items, list):
                return [self._node(item, depth + 1, field_name) for item in items]
            return [self._node(items, depth + 1, field_name)]
        if schema_type == "string":
            return self._string_example(node.get("format"), field_name)
        if schema_type in ("number", "integer"):
            return 0
        if schema_type == "boolean":
            return False
        if schema_type == "null":
            return None

        logger.debug(f"Unknown schema node at depth {depth}: {node!r:.200}")
        return None

    def _json_object(self, node: dict[str, Any], depth: int) -> dict[str, Any]:
        result: dict[str, Any] = {}
        properties = node.get("properties")
        if isinstance(properties, dict):
            for key, child in properties.items():
                result[key] = self._node(child, depth + 1, key)
        elif isinstance(node.get("additionalProperties"), dict):
            result["example_key"] = self._node(
                node["additionalProperties"], depth + 1, "example_key"
            )
        return result

    def _pick_json_option(self, options: list[Any]) -> Any:
        for preferred in _PREFERRED_JSON_TYPES:
            for option in options:
                if isinstance(option, dict) and option.get("type") == preferred:
                    return option
        return options[0]

    def _merge_all_of(
        self, parts: list[Any], depth: int, field_name: Optional[str]
    ) -> Any:
        merged: dict[str, Any] = {}
        for part in parts:
            example = self._node(part, depth + 1, field_name)
            if not isinstance(example, dict):
                return example
            merged.update(example)
        return merged

    # =========================================================================
    # Zod dialect
    # =========================================================================

    def _zod_node(
        self, node: dict[str, Any], depth: int, field_name: Optional[str]
    ) -> Any:
        type_name = node.get("typeName")
        definition = node.get("_def") if isinstance(node.get("_def"), dict) else {}

        if type_name == "ZodObject":
            shape = node.get("shape")
            result: dict[str, Any] = {}
            if isinstance(shape, dict):
                for key, child in shape.items():
                    result[key] = self._node(child, depth + 1, key)
            return result

        if type_name == "ZodString":
            checks = node.get("checks")
            for check in checks if isinstance(checks, list) else []:
                kind = check.get("kind") if isinstance(check, dict) else None
                if not isinstance(kind, str):
                    continue
                if kind in _STRING_FORMATS:
                    return _STRING_FORMATS[kind]
                if kind == "datetime":
                    return self._now_iso()
            description = node.get("description")
            if isinstance(description, str) and description.strip():
                slug = "_".join(description.lower().split())
                return f"string_value_for_{slug}"
            return self._string_example(None, field_name)

        if type_name in ("ZodNumber", "ZodBigInt"):
            return 0
        if type_name == "ZodBoolean":
            return False
        if type_name == "ZodDate":
            return self._now_iso()

        if type_name == "ZodArray":
            element = node.get("type", definition.get("type"))
            if element is None:
                return []
            return [self._node(element, depth + 1, field_name)]

        if type_name in ("ZodUnion", "ZodDiscriminatedUnion"):
            options = node.get("options", definition.get("options"))
            if not isinstance(options, list) or not options:
                return None
            return self._node(self._pick_zod_option(options), depth + 1, field_name)

        if type_name in ("ZodOptional", "ZodNullable", "ZodDefault"):
            inner = node.get("innerType", definition.get("innerType"))
            return self._node(inner, depth + 1, field_name)

        if type_name == "ZodEffects":
            inner = node.get("schema", definition.get("schema"))
            return self._node(inner, depth + 1, field_name)

        if type_name == "ZodEnum":
            values = node.get("options", definition.get("values"))
            if isinstance(values, list) and values:
                return values[0]
            return "enum_value"

        if type_name == "ZodNativeEnum":
            values = node.get("enum", definition.get("values"))
            if isinstance(values, dict) and values:
                # TS numeric enums carry reverse mappings; prefer string values
                for value in values.values():
                    if isinstance(value, str):
                        return value
                return next(iter(values.values()))
            return "native_enum_value"

        if type_name == "ZodLiteral":
            return node.get("value", definition.get("value"))

        if type_name == "ZodRecord":
            value_type = node.get("valueType", definition.get("valueType"))
            if value_type is None:
                return {"example_key": "example_value"}
            return {"example_key": self._node(value_type, depth + 1, "example_key")}

        if type_name == "ZodTuple":
            items = node.get("items", definition.get("items"))
            if not isinstance(items, list):
                return []
            return [self._node(item, depth + 1, field_name) for item in items]

        if type_name == "ZodIntersection":
            return self._node(definition.get("left"), depth + 1, field_name)

        if type_name in ("ZodAny", "ZodUnknown"):
            return "any_value"

        if type_name in ("ZodNull", "ZodUndefined", "ZodVoid", "ZodNever"):
            return None

        logger.warning(f"Unknown Zod typeName '{type_name}' in tool schema")
        return None

    def _pick_zod_option(self, options: list[Any]) -> Any:
        for preferred in _PREFERRED_ZOD_TYPES:
            for option in options:
                if isinstance(option, dict) and option.get("typeName") == preferred:
                    return option
        return options[0]

    # =========================================================================
    # Leaf helpers
    # =========================================================================

    def _string_example(self, fmt: Any, field_name: Optional[str]) -> str:
        if fmt == "date-time":
            return self._now_iso()
        if isinstance(fmt, str) and fmt in _STRING_FORMATS:
            return _STRING_FORMATS[fmt]
        if isinstance(field_name, str) and field_name:
            return f"example_{field_name.lower()}"
        return EXAMPLE_STRING

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()


def synthesize_example(shape: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Module-level shortcut for SchemaExampleSynthesizer(max_depth).synthesize()."""
    return SchemaExampleSynthesizer(max_depth=max_depth).synthesize(shape)
