"""
Unit tests for toolplan/providers/fake.py - FakeCompletionModel.
"""

import pytest

from toolplan.core.exceptions import ProviderError
from toolplan.providers.base import CompletionModel, CompletionResult
from toolplan.providers.fake import FakeCompletionModel


class TestFakeCompletionModel:
    def test_implements_port(self):
        assert isinstance(FakeCompletionModel(), CompletionModel)

    @pytest.mark.asyncio
    async def test_default_script_is_empty_plan(self):
        result = await FakeCompletionModel().complete("p")
        assert result.text == "[]"
        assert result.stopped

    @pytest.mark.asyncio
    async def test_script_is_consumed_in_order_and_last_repeats(self):
        model = FakeCompletionModel(["first", "second"])

        texts = [(await model.complete(f"p{i}")).text for i in range(3)]

        assert texts == ["first", "second", "second"]
        assert model.prompts == ["p0", "p1", "p2"]
        assert model.call_count == 3

    @pytest.mark.asyncio
    async def test_scripted_result_and_exception(self):
        scripted = CompletionResult(finish_reason="MAX_TOKENS")
        model = FakeCompletionModel([scripted, ProviderError("boom", provider="fake")])

        assert await model.complete("p") is scripted
        with pytest.raises(ProviderError):
            await model.complete("p")

    def test_default_payload(self):
        payload = FakeCompletionModel().build_payload("p", 0.1, "application/json")
        assert payload == {
            "prompt": "p",
            "temperature": 0.1,
            "response_mime_type": "application/json",
        }
