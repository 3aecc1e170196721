"""
Reference Expressions and the Placeholder Resolver

Plan step arguments may point at outputs of earlier steps with tokens of the
form {{steps[i].outputs.<path>}}, where <path> is a sequence of ".field" and
"[n]" segments. This module compiles such strings into typed nodes once, so
the dependency structure of a plan is explicit and can be checked before
anything runs:

- Reference: a token spanning a whole string; resolves to the typed value.
- Template: literal text mixed with tokens; resolves to interpolated text.

resolve() is a pure function of (value, context). The context maps step
indices to StepResult objects already produced in the current execution.
Every failure raises ResolutionError naming the expression, the path walked
so far and the reason; a missing value is never silently replaced by None.

Pattern: Compile-then-evaluate interpreter over JSON paths
"""

import json
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Mapping, Union

from toolplan.core.exceptions import ReferenceSyntaxError, ResolutionError
from toolplan.models.domain import StepResult, StepStatus

PathSegment = Union[str, int]

_TOKEN = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_REFERENCE = re.compile(r"steps\[(\d+)\]\.outputs((?:\.[A-Za-z0-9_$-]+|\[\d+\])*)")
_SEGMENT = re.compile(r"\.([A-Za-z0-9_$-]+)|\[(\d+)\]")


# =============================================================================
# Compiled nodes
# =============================================================================


@dataclass(frozen=True)
class Reference:
    """A pointer into the output of an earlier step."""

    step_index: int
    path: tuple[PathSegment, ...] = ()

    @property
    def expression(self) -> str:
        return f"steps[{self.step_index}].outputs{format_path(self.path)}"

    def __str__(self) -> str:
        return "{{" + self.expression + "}}"


@dataclass(frozen=True)
class Template:
    """Literal text interleaved with references."""

    parts: tuple[Union[str, Reference], ...]

    def references(self) -> list[Reference]:
        return [part for part in self.parts if isinstance(part, Reference)]


def format_path(path: tuple[PathSegment, ...]) -> str:
    """Render path segments back into ".field[0]" notation."""
    return "".join(f"[{seg}]" if isinstance(seg, int) else f".{seg}" for seg in path)


# =============================================================================
# Parsing
# =============================================================================


def parse_reference(body: str) -> Reference:
    """
    Parse the inside of a {{...}} token.

    Args:
        body: Token body without braces, e.g. "steps[1].outputs.orders[0].id".

    Raises:
        ReferenceSyntaxError: If the body does not match the grammar.
    """
    text = body.strip()
    match = _REFERENCE.fullmatch(text)
    if match is None:
        raise ReferenceSyntaxError(
            f"Malformed reference expression '{text}'", expression=text
        )
    path: list[PathSegment] = []
    for seg in _SEGMENT.finditer(match.group(2)):
        field, index = seg.groups()
        path.append(int(index) if index is not None else field)
    return Reference(step_index=int(match.group(1)), path=tuple(path))


def compile_string(value: str) -> Union[str, Reference, Template]:
    """
    Compile one string into a literal, a Reference or a Template.

    Braced tokens whose body does not start with "steps" are left as
    literal text.
    """
    parts: list[Union[str, Reference]] = []
    cursor = 0
    for match in _TOKEN.finditer(value):
        body = match.group(1).strip()
        if not body.startswith("steps"):
            continue
        if match.start() > cursor:
            parts.append(value[cursor:match.start()])
        parts.append(parse_reference(body))
        cursor = match.end()

    if not parts:
        return value
    if cursor < len(value):
        parts.append(value[cursor:])
    if len(parts) == 1 and isinstance(parts[0], Reference):
        return parts[0]
    return Template(parts=tuple(parts))


def compile_value(value: Any) -> Any:
    """
    Compile a JSON value, replacing reference-bearing strings with nodes.

    Containers are compiled element-wise; other values are returned as is.

    Raises:
        ReferenceSyntaxError: On the first malformed token.
    """
    if isinstance(value, str):
        return compile_string(value)
    if isinstance(value, list):
        return [compile_value(item) for item in value]
    if isinstance(value, dict):
        return {key: compile_value(item) for key, item in value.items()}
    return value


def iter_references(compiled: Any) -> Iterator[Reference]:
    """Yield every Reference inside a compiled value, depth first."""
    if isinstance(compiled, Reference):
        yield compiled
    elif isinstance(compiled, Template):
        yield from compiled.references()
    elif isinstance(compiled, list):
        for item in compiled:
            yield from iter_references(item)
    elif isinstance(compiled, dict):
        for item in compiled.values():
            yield from iter_references(item)


def renumber(compiled: Any, mapping: Mapping[int, int]) -> Any:
    """
    Rewrite every Reference's step index through mapping.

    Used after plan filtering, when the surviving steps move to new positions.

    Raises:
        KeyError: If a reference points at an index missing from mapping.
    """
    if isinstance(compiled, Reference):
        return Reference(step_index=mapping[compiled.step_index], path=compiled.path)
    if isinstance(compiled, Template):
        return Template(parts=tuple(renumber(part, mapping) for part in compiled.parts))
    if isinstance(compiled, list):
        return [renumber(item, mapping) for item in compiled]
    if isinstance(compiled, dict):
        return {key: renumber(item, mapping) for key, item in compiled.items()}
    return compiled


def render(compiled: Any) -> Any:
    """
    Turn a compiled value back into plain JSON with {{...}} tokens.

    Example:
        >>> render(compile_value({"id": "{{ steps[2].outputs.id }}"}))
        {'id': '{{steps[2].outputs.id}}'}
    """
    if isinstance(compiled, (Reference, Template)):
        parts = compiled.parts if isinstance(compiled, Template) else (compiled,)
        return "".join(str(part) for part in parts)
    if isinstance(compiled, list):
        return [render(item) for item in compiled]
    if isinstance(compiled, dict):
        return {key: render(item) for key, item in compiled.items()}
    return compiled


def check_references(compiled: Any, step_index: int) -> None:
    """
    Ensure every reference in a step's arguments points at an earlier step.

    Raises:
        ResolutionError: With reason "forward_reference" for a reference to
            the step itself or a later step.
    """
    for ref in iter_references(compiled):
        if ref.step_index >= step_index:
            kind = "itself" if ref.step_index == step_index else "a later step"
            raise ResolutionError(
                f"Step {step_index} references {kind} in '{ref.expression}'",
                expression=ref.expression,
                path=ref.expression,
                reason="forward_reference",
            )


# =============================================================================
# Resolution
# =============================================================================


def lookup(ref: Reference, context: Mapping[int, StepResult]) -> Any:
    """
    Walk a reference's path through the referenced step's output.

    Raises:
        ResolutionError: If the step is unknown or failed, or the path
            cannot be followed.
    """
    expression = ref.expression
    result = context.get(ref.step_index)
    if result is None:
        raise ResolutionError(
            f"Cannot resolve '{expression}': step {ref.step_index} has not produced a result",
            expression=expression,
            path=f"steps[{ref.step_index}]",
            reason="unknown_step",
        )
    if result.status != StepStatus.SUCCESS:
        raise ResolutionError(
            f"Cannot resolve '{expression}': step {ref.step_index} "
            f"({result.tool_name}) failed: {result.error_message}",
            expression=expression,
            path=f"steps[{ref.step_index}]",
            reason="step_failed",
        )

    current: Any = result.output
    walked = f"steps[{ref.step_index}].outputs"
    for segment in ref.path:
        if isinstance(segment, int):
            if not isinstance(current, list):
                raise _path_error(expression, walked, current, f"[{segment}]")
            if segment >= len(current):
                raise ResolutionError(
                    f"Cannot resolve '{expression}': index {segment} out of range "
                    f"at '{walked}' (length {len(current)})",
                    expression=expression,
                    path=walked,
                    reason="index_out_of_range",
                )
            current = current[segment]
            walked += f"[{segment}]"
        else:
            if not isinstance(current, dict):
                raise _path_error(expression, walked, current, f".{segment}")
            if segment not in current:
                available = ", ".join(current.keys()) or "none"
                raise ResolutionError(
                    f"Cannot resolve '{expression}': field '{segment}' not found at "
                    f"'{walked}'. Available fields: {available}",
                    expression=expression,
                    path=walked,
                    reason="missing_field",
                )
            current = current[segment]
            walked += f".{segment}"
    return current


def _path_error(expression: str, walked: str, current: Any, accessor: str) -> ResolutionError:
    if isinstance(current, dict):
        kind, reason = "an object", "index_on_object"
    elif isinstance(current, list):
        kind, reason = "a list", "field_on_list"
    else:
        kind, reason = f"a {_json_kind(current)}", "not_a_container"
    return ResolutionError(
        f"Cannot resolve '{expression}': cannot apply '{accessor}' to {kind} at '{walked}'",
        expression=expression,
        path=walked,
        reason=reason,
    )


def _json_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


def to_text(value: Any) -> str:
    """Textual form used when interpolating into a Template."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def evaluate(compiled: Any, context: Mapping[int, StepResult]) -> Any:
    """Evaluate a compiled value against the context."""
    if isinstance(compiled, Reference):
        return lookup(compiled, context)
    if isinstance(compiled, Template):
        return "".join(
            to_text(lookup(part, context)) if isinstance(part, Reference) else part
            for part in compiled.parts
        )
    if isinstance(compiled, list):
        return [evaluate(item, context) for item in compiled]
    if isinstance(compiled, dict):
        return {key: evaluate(item, context) for key, item in compiled.items()}
    return compiled


def resolve(value: Any, context: Mapping[int, StepResult]) -> Any:
    """
    Resolve all reference expressions inside a JSON value.

    Example:
        >>> ctx = {0: StepResult.success(0, "getCustomer", {"id": "abc"})}
        >>> resolve("{{steps[0].outputs.id}}", ctx)
        'abc'
        >>> resolve("Customer {{steps[0].outputs.id}}", ctx)
        'Customer abc'

    Raises:
        ResolutionError: On the first reference that cannot be resolved.
    """
    return evaluate(compile_value(value), context)


def resolve_arguments(
    args: Mapping[str, Any], context: Mapping[int, StepResult], step_index: int
) -> dict[str, Any]:
    """
    Resolve a step's whole argument object.

    References to the step itself or later steps are rejected before any
    lookup happens.
    """
    compiled = compile_value(dict(args))
    check_references(compiled, step_index)
    return evaluate(compiled, context)
