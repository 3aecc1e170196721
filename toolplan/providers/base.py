"""
Completion Model Interface - Abstract Provider Class

This module defines the port the planner talks to. A completion model
accepts one text prompt plus generation parameters and returns the text and
the terminal reason reported by the model.

Design Pattern:
- Ports and Adapters (Hexagonal Architecture)
- CompletionModel serves as the "port" (interface)
- GeminiCompletionModel and FakeCompletionModel serve as "adapters"
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field

FINISH_REASON_STOP = "STOP"


class CompletionResult(BaseModel):
    """
    Response envelope of one completion call.

    Attributes:
        text: Completion text (None if the model produced no text part).
        finish_reason: Terminal reason as reported by the provider
            (e.g. "STOP", "MAX_TOKENS", "SAFETY").
        raw: Decoded provider response, kept for the audit record.
        model: Model identifier that served the request.
        safety_ratings: Provider safety annotations, if any.
    """

    text: Optional[str] = None
    finish_reason: Optional[str] = None
    raw: Any = None
    model: str = ""
    safety_ratings: Optional[list[dict[str, Any]]] = Field(default=None)

    @property
    def stopped(self) -> bool:
        """True when the model finished normally."""
        return self.finish_reason == FINISH_REASON_STOP


class CompletionModel(ABC):
    """
    Abstract base class for completion model adapters.

    Implementations make exactly one provider call per complete() and do not
    retry; the reply pipeline owns any higher-level retry.

    Example:
        >>> class EchoModel(CompletionModel):
        ...     model_name = "echo"
        ...     async def complete(self, prompt, temperature=0.2,
        ...                        response_mime_type=None):
        ...         return CompletionResult(text="[]", finish_reason="STOP")
    """

    model_name: str = ""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.2,
        response_mime_type: Optional[str] = None,
    ) -> CompletionResult:
        """
        Run one completion.

        Args:
            prompt: The full prompt text.
            temperature: Sampling temperature (low for JSON output).
            response_mime_type: Requested response type, e.g. "application/json".

        Returns:
            CompletionResult with text and finish reason.

        Raises:
            ProviderError: If the provider call fails.
        """
        ...

    def build_payload(
        self,
        prompt: str,
        temperature: float = 0.2,
        response_mime_type: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Request payload as sent to the provider, for audit purposes.

        Adapters override this when their wire format differs.
        """
        payload: dict[str, Any] = {"prompt": prompt, "temperature": temperature}
        if response_mime_type:
            payload["response_mime_type"] = response_mime_type
        return payload

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""
        return None
