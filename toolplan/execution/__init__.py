"""
Execution Package - plan executor, credential resolvers and action digest.
"""

from toolplan.execution.digest import build_action_digest
from toolplan.execution.executor import PlanExecutor
from toolplan.execution.secrets import (
    ProviderSecretsResolver,
    SecretsResolver,
    ToolCredentialResolver,
)

__all__ = [
    "PlanExecutor",
    "SecretsResolver",
    "ToolCredentialResolver",
    "ProviderSecretsResolver",
    "build_action_digest",
]
