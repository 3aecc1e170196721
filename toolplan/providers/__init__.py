"""
Providers Package - completion model adapters used by the planner.
"""

from toolplan.providers.base import CompletionModel, CompletionResult
from toolplan.providers.fake import FakeCompletionModel
from toolplan.providers.gemini import GeminiCompletionModel

__all__ = [
    "CompletionModel",
    "CompletionResult",
    "FakeCompletionModel",
    "GeminiCompletionModel",
]
