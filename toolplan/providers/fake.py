"""
Fake Completion Model - Test Double Implementation

A CompletionModel that returns scripted responses without network calls.
This is NOT mocking: it is a proper implementation of the interface with
deterministic behavior, usable for tests and for local development without
an API key.

Pattern: FakeRepository (test doubles through duck typing)
"""

from collections import deque
from typing import Any, Optional, Union

from toolplan.providers.base import FINISH_REASON_STOP, CompletionModel, CompletionResult


class FakeCompletionModel(CompletionModel):
    """
    Fake completion model for testing and local development.

    Each call pops the next scripted response. Strings become STOP
    completions, CompletionResult objects are returned as is and
    exceptions are raised. When the script runs out the last entry repeats.

    Attributes:
        prompts: Every prompt received, in order.

    Example:
        >>> model = FakeCompletionModel(['[{"tool": "getOrders", "args": {}}]'])
        >>> result = await model.complete("plan this")
        >>> result.text
        '[{"tool": "getOrders", "args": {}}]'
    """

    def __init__(
        self,
        responses: Optional[list[Union[str, CompletionResult, Exception]]] = None,
        model_name: str = "fake-planner",
    ) -> None:
        self.model_name = model_name
        self._responses: deque[Union[str, CompletionResult, Exception]] = deque(
            responses or ["[]"]
        )
        self.prompts: list[str] = []
        self.calls: list[dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.2,
        response_mime_type: Optional[str] = None,
    ) -> CompletionResult:
        self.prompts.append(prompt)
        self.calls.append(
            {"temperature": temperature, "response_mime_type": response_mime_type}
        )

        response = self._responses[0]
        if len(self._responses) > 1:
            self._responses.popleft()

        if isinstance(response, Exception):
            raise response
        if isinstance(response, CompletionResult):
            return response
        return CompletionResult(
            text=response,
            finish_reason=FINISH_REASON_STOP,
            raw={"text": response},
            model=self.model_name,
        )
