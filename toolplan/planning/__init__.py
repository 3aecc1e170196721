"""
Planning Package - schema examples, tool catalog, references and plan generation.
"""

from toolplan.planning.catalog import DuplicateToolError, ToolCatalog, ToolNotFoundError
from toolplan.planning.generator import GenerationResult, PlanGenerator, parse_plan_text
from toolplan.planning.references import Reference, Template, resolve, resolve_arguments
from toolplan.planning.schema_examples import SchemaExampleSynthesizer, synthesize_example

__all__ = [
    "ToolCatalog",
    "ToolNotFoundError",
    "DuplicateToolError",
    "PlanGenerator",
    "GenerationResult",
    "parse_plan_text",
    "Reference",
    "Template",
    "resolve",
    "resolve_arguments",
    "SchemaExampleSynthesizer",
    "synthesize_example",
]
