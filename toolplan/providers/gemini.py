"""
Gemini Provider - Google Generative AI Adapter

This module implements the CompletionModel port against the Gemini REST API
(models/{model}:generateContent). The planner asks for a JSON-biased
response with a low temperature.

No retry happens here: a single transient failure surfaces as a
ProviderError and the planner turns it into a PlanGenerationError.

Design Patterns:
- Ports and Adapters: GeminiCompletionModel implements CompletionModel
- Dependency injection of the httpx client for testing
"""

import logging
from typing import Any, Optional

import httpx

from toolplan.core.exceptions import ProviderError
from toolplan.providers.base import CompletionModel, CompletionResult

logger = logging.getLogger(__name__)

# Default API base URL
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-pro"


class GeminiCompletionModel(CompletionModel):
    """
    Google Gemini completion adapter.

    Args:
        api_key: Google AI API key.
        model: Model identifier (default: gemini-1.5-pro).
        api_base: Base URL for the Gemini API.
        timeout_seconds: Timeout for the whole call.
        client: Optional pre-built httpx.AsyncClient (tests inject one
            backed by httpx.MockTransport).

    Example:
        >>> model = GeminiCompletionModel(api_key="AIza...")
        >>> result = await model.complete("Plan tools for ...",
        ...                               response_mime_type="application/json")
        >>> result.finish_reason
        'STOP'
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_base: Optional[str] = None,
        timeout_seconds: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_key:
            logger.warning("No Gemini API key provided. Set TOOLPLAN_GEMINI_API_KEY.")
        self._api_key = api_key
        self.model_name = model
        self._api_base = (api_base or GEMINI_API_BASE).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def __aenter__(self) -> "GeminiCompletionModel":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # complete()
    # =========================================================================

    def build_payload(
        self,
        prompt: str,
        temperature: float = 0.2,
        response_mime_type: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Build the generateContent payload.

        Gemini expects contents[].parts[].text and a generationConfig block.
        """
        generation_config: dict[str, Any] = {"temperature": temperature}
        if response_mime_type:
            generation_config["response_mime_type"] = response_mime_type
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.2,
        response_mime_type: Optional[str] = None,
    ) -> CompletionResult:
        """
        Run one generateContent call.

        Raises:
            ProviderError: On transport errors, non-200 responses, a body
                that is not JSON, or a candidate that is not an object.
        """
        payload = self.build_payload(prompt, temperature, response_mime_type)
        url = f"{self._api_base}/models/{self.model_name}:generateContent"

        try:
            response = await self._client.post(
                url,
                json=payload,
                params={"key": self._api_key},
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Gemini request failed: {e}", provider="gemini"
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Gemini returned a non-JSON body ({response.status_code}): "
                f"{response.text[:200]}",
                provider="gemini",
                status_code=response.status_code,
                raw_response={"body": response.text},
            ) from e

        if response.status_code != 200:
            error = data.get("error") if isinstance(data, dict) else None
            detail = error.get("message") if isinstance(error, dict) else error
            raise ProviderError(
                f"Gemini API error: {response.status_code} - {detail or data}",
                provider="gemini",
                status_code=response.status_code,
                raw_response=data,
            )

        logger.info("Gemini API call successful")
        return self._to_result(data)

    def _to_result(self, data: Any) -> CompletionResult:
        """
        Map a generateContent response onto a CompletionResult.

        Raises:
            ProviderError: If the first candidate is not an object.
        """
        candidates = (data.get("candidates") if isinstance(data, dict) else None) or []
        if not candidates:
            return CompletionResult(raw=data, model=self.model_name)

        candidate = candidates[0] if isinstance(candidates, list) else None
        if not isinstance(candidate, dict):
            raise ProviderError(
                f"Gemini returned a malformed candidate: {candidate!r:.200}",
                provider="gemini",
                status_code=200,
                raw_response=data,
            )

        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        text_parts = [
            part["text"]
            for part in (parts if isinstance(parts, list) else [])
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]

        finish_reason = candidate.get("finishReason")
        ratings = candidate.get("safetyRatings")
        return CompletionResult(
            text="".join(text_parts) if text_parts else None,
            finish_reason=finish_reason if isinstance(finish_reason, str) else None,
            raw=data,
            model=self.model_name,
            safety_ratings=(
                [r for r in ratings if isinstance(r, dict)] if isinstance(ratings, list) else None
            ),
        )
