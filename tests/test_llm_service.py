"""Tests for the LLM service wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from flowgen.ai.llm import LLMService, extract_text_from_content, strip_code_fences
from flowgen.config import Settings
from flowgen.core.errors import LLMUnavailableError


class TestContentHelpers:
    def test_extract_text_from_blocks(self):
        content = [
            {"type": "text", "text": "Hello "},
            {"type": "tool_use", "id": "t1"},
            "world",
        ]
        assert extract_text_from_content(content) == "Hello world"

    def test_extract_text_from_dict(self):
        assert extract_text_from_content({"type": "text", "text": "hi"}) == "hi"

    def test_strip_code_fences(self):
        assert strip_code_fences("```json\n{\"a\": 1}\n```") == '{"a": 1}'
        assert strip_code_fences("  plain  ") == "plain"

    def test_inner_fences_are_kept(self):
        text = "Intro\n```js\nx\n```"
        assert strip_code_fences(text) == text


class TestLLMService:
    def test_unconfigured_provider_raises(self):
        service = LLMService(Settings(llm_provider="openai", openai_api_key=""))
        assert service.is_configured() is False
        with pytest.raises(LLMUnavailableError, match="openai API key not configured"):
            service.get_llm()

    def test_provider_selects_model(self):
        service = LLMService(Settings(llm_provider="anthropic", anthropic_model="claude-test"))
        assert service.provider == "anthropic"
        assert service.model == "claude-test"

    def test_clients_cached_per_temperature(self):
        service = LLMService(Settings(llm_provider="openai", openai_api_key="sk-test"))
        with patch.object(service, "_get_openai", side_effect=lambda t: MagicMock(name=f"llm-{t}")) as factory:
            first = service.get_llm(0.3)
            again = service.get_llm(0.3)
            other = service.get_llm(0.7)

        assert first is again
        assert first is not other
        assert factory.call_count == 2

    @pytest.mark.asyncio
    async def test_complete_sends_system_and_user_messages(self):
        service = LLMService(Settings(llm_provider="openai", openai_api_key="sk-test"))
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=MagicMock(content="<div/>"))

        with patch.object(service, "get_llm", return_value=llm):
            text = await service.complete("system text", "user text", temperature=0.2)

        assert text == "<div/>"
        messages = llm.ainvoke.await_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert messages[1].content == "user text"

    @pytest.mark.asyncio
    async def test_provider_errors_become_unavailable(self):
        service = LLMService(Settings(llm_provider="openai", openai_api_key="sk-test"))
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("rate limited"))

        with patch.object(service, "get_llm", return_value=llm):
            with pytest.raises(LLMUnavailableError, match="rate limited"):
                await service.complete("s", "u")
