"""
Plan Generator - turns an email plus a tool catalog into a validated Plan.

The generator builds one planning prompt, makes exactly one completion call,
parses the model's JSON and filters the result down to steps that are safe
to execute:

- every step names a tool that exists in the catalog
- every reference in step i points at a kept step j < i, and is renumbered
  to that step's position in the filtered plan
- argument names are checked against the tool's declared arguments

Invalid steps are dropped with a ToolValidationWarning instead of failing
the whole plan. Every attempt, successful or not, is written to the audit
sink before the generator returns or raises.

Pattern: Template Method (prompt -> complete -> parse -> filter -> audit)
Pattern: Dependency Injection (completion model and audit sink are injected)
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, NoReturn, Optional

from pydantic import ValidationError

from toolplan.audit.sink import AuditSink
from toolplan.core.config import Settings
from toolplan.core.exceptions import (
    PlanGenerationError,
    ProviderError,
    ResolutionError,
    ToolValidationWarning,
)
from toolplan.models.domain import Plan, PlanningAuditRecord, PlanStep, ToolDefinition
from toolplan.observability.metrics import record_dropped_step, record_plan_outcome
from toolplan.planning.catalog import ToolCatalog
from toolplan.planning.prompts import NO_INSTRUCTIONS, render_planning_prompt
from toolplan.planning.references import (
    check_references,
    compile_value,
    iter_references,
    render,
    renumber,
)
from toolplan.planning.schema_examples import DEFAULT_MAX_DEPTH, SchemaExampleSynthesizer
from toolplan.providers.base import CompletionModel, CompletionResult

logger = logging.getLogger(__name__)

JSON_MIME_TYPE = "application/json"
DEFAULT_EMAIL_BODY_MAX_CHARS = 8000
DEFAULT_TEMPERATURE = 0.2

_TOOL_KEYS = ("tool", "toolName", "tool_name")
_FENCE = re.compile(r"\A```[A-Za-z]*[ \t]*\n?(.*?)\n?```\Z", re.DOTALL)


@dataclass(frozen=True)
class GenerationResult:
    """A generated plan plus the warnings for the steps that were dropped."""

    plan: Plan
    warnings: list[ToolValidationWarning] = field(default_factory=list)


# =============================================================================
# Model output parsing
# =============================================================================


def strip_code_fence(text: str) -> str:
    """
    Remove a single markdown code fence wrapping the whole text.

    Example:
        >>> strip_code_fence('```json\\n[]\\n```')
        '[]'
    """
    stripped = text.strip()
    match = _FENCE.match(stripped)
    if match is None:
        return stripped
    return match.group(1).strip()


def parse_plan_text(text: str) -> list[Any]:
    """
    Parse model text into the raw list of step candidates.

    Accepts a bare JSON array or an object whose "plan" field is an array.

    Raises:
        ValueError: If the text is not JSON or has neither shape.
    """
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise ValueError(f"Model response is not valid JSON: {e}") from e

    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("plan"), list):
        logger.warning("Model returned an object with a 'plan' key instead of an array; unwrapping")
        return data["plan"]
    raise ValueError("Model response JSON is not an array or a {plan: [...]} object.")


# =============================================================================
# PlanGenerator
# =============================================================================


class PlanGenerator:
    """
    Produces validated plans from email content.

    Attributes:
        model: The completion model adapter.
        audit_sink: Receives one PlanningAuditRecord per attempt (optional).

    Example:
        >>> generator = PlanGenerator(model=FakeCompletionModel(['[]']))
        >>> plan = await generator.generate(
        ...     "Where is my order?", "jane@example.com", "Jane", catalog
        ... )
    """

    def __init__(
        self,
        model: CompletionModel,
        audit_sink: Optional[AuditSink] = None,
        email_body_max_chars: int = DEFAULT_EMAIL_BODY_MAX_CHARS,
        schema_max_depth: int = DEFAULT_MAX_DEPTH,
        strict_argument_names: bool = False,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        self.model = model
        self.audit_sink = audit_sink
        self.email_body_max_chars = email_body_max_chars
        self.strict_argument_names = strict_argument_names
        self.temperature = temperature
        self._synthesizer = SchemaExampleSynthesizer(max_depth=schema_max_depth)

    @classmethod
    def from_settings(
        cls,
        model: CompletionModel,
        settings: Settings,
        audit_sink: Optional[AuditSink] = None,
    ) -> "PlanGenerator":
        """Build a generator configured from application settings."""
        return cls(
            model=model,
            audit_sink=audit_sink,
            email_body_max_chars=settings.email_body_max_chars,
            schema_max_depth=settings.schema_max_depth,
            strict_argument_names=settings.strict_argument_names,
            temperature=settings.planner_temperature,
        )

    # =========================================================================
    # Public API
    # =========================================================================

    async def generate(
        self,
        email_body: str,
        sender_email: str,
        sender_name: str,
        catalog: ToolCatalog,
        interaction_id: Optional[str] = None,
    ) -> Plan:
        """
        Generate a plan for one email.

        Args:
            email_body: Email text (truncated before being sent to the model).
            sender_email: Sender address, offered to the model as an argument source.
            sender_name: Sender display name.
            catalog: Tools available for this cycle; inactive ones are ignored.
            interaction_id: Correlates the audit record with the email.

        Returns:
            The filtered plan (possibly empty).

        Raises:
            PlanGenerationError: If the model call fails, does not finish
                normally, or its output cannot be parsed into a step array.
        """
        result = await self.generate_with_warnings(
            email_body, sender_email, sender_name, catalog, interaction_id
        )
        return result.plan

    async def generate_with_warnings(
        self,
        email_body: str,
        sender_email: str,
        sender_name: str,
        catalog: ToolCatalog,
        interaction_id: Optional[str] = None,
    ) -> GenerationResult:
        """Same as generate(), also returning the dropped-step warnings."""
        tools = catalog.active()
        if not email_body or not email_body.strip():
            logger.warning("Email body is empty; skipping plan generation")
            record_plan_outcome("skipped")
            return GenerationResult(plan=Plan())
        if len(tools) == 0:
            logger.info("No active tools available; returning empty plan")
            record_plan_outcome("skipped")
            return GenerationResult(plan=Plan())

        prompt = render_planning_prompt(
            email_body=email_body[: self.email_body_max_chars],
            sender_email=sender_email,
            sender_name=sender_name,
            tools=self.build_tool_bundle(tools),
        )
        payload = self.model.build_payload(prompt, self.temperature, JSON_MIME_TYPE)
        model_name = self.model.model_name
        logger.info(f"Generating tool plan with model {model_name} over {len(tools)} tools")

        try:
            completion = await self.model.complete(
                prompt, temperature=self.temperature, response_mime_type=JSON_MIME_TYPE
            )
        except ProviderError as e:
            await self._fail(e.message, prompt, payload, e.raw_response, interaction_id, cause=e)
        except Exception as e:
            logger.exception("Completion model raised an unexpected error")
            await self._fail(
                f"Completion call failed: {type(e).__name__}: {e}",
                prompt,
                payload,
                None,
                interaction_id,
                cause=e,
            )

        problem = self._completion_problem(completion)
        if problem is not None:
            await self._fail(problem, prompt, payload, completion.raw, interaction_id)

        try:
            candidates = parse_plan_text(completion.text)
        except ValueError as e:
            await self._fail(str(e), prompt, payload, completion.raw, interaction_id, cause=e)

        steps, warnings = self._filter_steps(candidates, tools)
        plan = Plan(steps=steps)

        await self._audit(
            PlanningAuditRecord(
                interaction_id=interaction_id,
                prompt_payload=payload,
                raw_model_response=completion.raw,
                final_plan=plan.to_json_list(),
                model_identifier=completion.model or model_name,
            )
        )
        record_plan_outcome("planned" if len(plan) else "empty")
        logger.info(
            f"Tool plan generated: {len(plan)} steps kept, {len(warnings)} dropped "
            f"({', '.join(plan.tool_names()) or 'no tools'})"
        )
        return GenerationResult(plan=plan, warnings=warnings)

    def build_tool_bundle(self, catalog: ToolCatalog) -> list[dict[str, Any]]:
        """
        Describe each tool for the prompt.

        Returns:
            One dict per tool with name, description, args_schema_keys,
            args_schema_example and output_schema.
        """
        bundle = []
        for tool in catalog:
            example = self._synthesizer.synthesize(tool.input_shape)
            keys = list(example.keys()) if isinstance(example, dict) else []
            bundle.append(
                {
                    "name": tool.name,
                    "description": tool.instructions or NO_INSTRUCTIONS,
                    "args_schema_keys": keys,
                    "args_schema_example": example,
                    "output_schema": tool.output_shape,
                }
            )
        return bundle

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def _completion_problem(completion: CompletionResult) -> Optional[str]:
        """Describe why a completion is unusable, or None if it is usable."""
        if completion.finish_reason is None and completion.text is None:
            return "No candidates found in model response."
        if completion.finish_reason == "SAFETY":
            ratings = json.dumps(completion.safety_ratings or [])
            return f"Model response blocked due to safety settings: {ratings}"
        if not completion.stopped:
            return f"Model generation finished with reason: {completion.finish_reason}"
        if not completion.text:
            return "No text content in model response."
        return None

    def _filter_steps(
        self, candidates: list[Any], catalog: ToolCatalog
    ) -> tuple[list[PlanStep], list[ToolValidationWarning]]:
        steps: list[PlanStep] = []
        warnings: list[ToolValidationWarning] = []
        # raw model index -> index in the filtered plan
        kept: dict[int, int] = {}

        for raw_index, candidate in enumerate(candidates):
            try:
                step = self._validate_step(candidate, raw_index, kept, catalog)
            except ToolValidationWarning as warning:
                logger.warning(f"Dropping plan step {raw_index}: {warning.message}")
                record_dropped_step(warning.reason)
                warnings.append(warning)
                continue
            kept[raw_index] = len(steps)
            steps.append(step)

        return steps, warnings

    def _validate_step(
        self, candidate: Any, raw_index: int, kept: dict[int, int], catalog: ToolCatalog
    ) -> PlanStep:
        """
        Validate one raw step.

        References are written against the model's own numbering. They must
        point below raw_index and at a step that was kept; they are then
        rewritten to the kept step's position in the filtered plan.

        Args:
            candidate: Element of the model's array.
            raw_index: Index in the model's array.
            kept: Raw index to filtered index for the steps kept so far.

        Raises:
            ToolValidationWarning: If the step must be dropped.
        """
        if not isinstance(candidate, dict):
            raise ToolValidationWarning(
                f"Step is not an object: {candidate!r}", raw_index, reason="not_an_object"
            )

        tool_name = next((candidate[key] for key in _TOOL_KEYS if key in candidate), None)
        if not isinstance(tool_name, str) or not tool_name:
            raise ToolValidationWarning(
                "Step has no tool name", raw_index, reason="missing_tool_name"
            )
        if tool_name not in catalog:
            raise ToolValidationWarning(
                f"Invalid or unknown tool in plan: '{tool_name}'",
                raw_index,
                tool_name=tool_name,
                reason="unknown_tool",
            )

        args = candidate.get("args")
        if args is None:
            args = {}
        if not isinstance(args, dict):
            raise ToolValidationWarning(
                f"Arguments for '{tool_name}' are not an object",
                raw_index,
                tool_name=tool_name,
                reason="invalid_arguments",
            )

        try:
            compiled = compile_value(args)
            check_references(compiled, raw_index)
        except ResolutionError as e:
            reason = "malformed_reference" if e.reason == "syntax" else "forward_reference"
            raise ToolValidationWarning(
                e.message, raw_index, tool_name=tool_name, reason=reason
            ) from e

        references = list(iter_references(compiled))
        dangling = sorted({ref.step_index for ref in references if ref.step_index not in kept})
        if dangling:
            raise ToolValidationWarning(
                f"Step {raw_index} ('{tool_name}') references dropped step(s) {dangling}",
                raw_index,
                tool_name=tool_name,
                reason="dangling_reference",
            )
        if any(kept[ref.step_index] != ref.step_index for ref in references):
            args = render(renumber(compiled, kept))

        args = self._check_argument_names(catalog.get(tool_name), args)

        reasoning = candidate.get("reasoning")
        try:
            return PlanStep(
                tool_name=tool_name,
                args=args,
                reasoning=reasoning if isinstance(reasoning, str) else "",
            )
        except ValidationError as e:
            raise ToolValidationWarning(
                f"Step for '{tool_name}' is invalid: {e}",
                raw_index,
                tool_name=tool_name,
            ) from e

    def _check_argument_names(
        self, tool: ToolDefinition, args: dict[str, Any]
    ) -> dict[str, Any]:
        """Log (or, in strict mode, remove) argument keys the tool does not declare."""
        if tool.input_shape is None:
            return args
        declared = set(self._synthesizer.argument_names(tool.input_shape))
        unknown = [key for key in args if key not in declared]
        if not unknown:
            return args

        logger.warning(
            f"Plan step for '{tool.name}' uses undeclared arguments {unknown}; "
            f"declared: {sorted(declared)}"
        )
        if not self.strict_argument_names:
            return args
        return {key: value for key, value in args.items() if key in declared}

    # =========================================================================
    # Audit
    # =========================================================================

    async def _fail(
        self,
        message: str,
        prompt: str,
        payload: dict[str, Any],
        raw_response: Any,
        interaction_id: Optional[str],
        cause: Optional[Exception] = None,
    ) -> NoReturn:
        """Audit a failed attempt and raise PlanGenerationError."""
        logger.error(f"Plan generation failed: {message}")
        await self._audit(
            PlanningAuditRecord(
                interaction_id=interaction_id,
                prompt_payload=payload,
                raw_model_response=raw_response,
                final_plan=None,
                model_identifier=self.model.model_name,
                error_message=message,
            )
        )
        record_plan_outcome("failed")
        raise PlanGenerationError(
            message,
            prompt=prompt,
            raw_response=raw_response,
            model=self.model.model_name,
        ) from cause

    async def _audit(self, record: PlanningAuditRecord) -> None:
        if self.audit_sink is None:
            return
        try:
            await self.audit_sink.record_planning(record)
        except Exception as e:
            logger.error(f"Failed to write planning audit record: {e}")
