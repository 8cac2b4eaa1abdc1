"""Tests for the Ollama client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from quotelink.core.exceptions import GenerationError
from quotelink.infrastructure.llm.ollama_client import SYSTEM_PROMPT, OllamaClient


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


@pytest.fixture
def api():
    with patch("quotelink.infrastructure.llm.ollama_client.AsyncOpenAI") as factory:
        client = MagicMock()
        client.chat.completions.create = AsyncMock()
        factory.return_value = client
        yield client


class TestGenerate:
    """Tests for OllamaClient.generate."""

    @pytest.mark.asyncio
    async def test_structured_output(self, api):
        """Schema should be sent as a json_schema response format."""
        api.chat.completions.create.return_value = _completion('{"answer": "A"}')
        client = OllamaClient(model="test-model", max_tokens=64, temperature=0.0)

        result = await client.generate("Q", schema={"type": "object"}, schema_name="grounded")

        assert result == '{"answer": "A"}'
        kwargs = api.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"] == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "Q"},
        ]
        assert kwargs["response_format"] == {
            "type": "json_schema",
            "json_schema": {"name": "grounded", "schema": {"type": "object"}},
        }

    @pytest.mark.asyncio
    async def test_free_text(self, api):
        api.chat.completions.create.return_value = _completion("plain")

        assert await OllamaClient().generate("Q") == "plain"
        assert "response_format" not in api.chat.completions.create.call_args.kwargs

    @pytest.mark.asyncio
    async def test_api_error(self, api):
        api.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", "http://localhost:11434/v1/chat/completions")
        )

        with pytest.raises(GenerationError):
            await OllamaClient().generate("Q")

    @pytest.mark.asyncio
    async def test_empty_content(self, api):
        api.chat.completions.create.return_value = _completion(None)

        with pytest.raises(GenerationError, match="empty"):
            await OllamaClient().generate("Q")


class TestChatStream:
    """Tests for OllamaClient.chat_stream."""

    @pytest.mark.asyncio
    async def test_yields_tokens(self, api):
        async def stream():
            for content in ["Hel", None, "lo"]:
                yield _chunk(content)

        api.chat.completions.create.return_value = stream()

        tokens = [t async for t in OllamaClient().chat_stream("Q", system_prompt="S")]

        assert tokens == ["Hel", "lo"]
        kwargs = api.chat.completions.create.call_args.kwargs
        assert kwargs["stream"] is True
        assert kwargs["messages"][0] == {"role": "system", "content": "S"}

    @pytest.mark.asyncio
    async def test_stream_error(self, api):
        api.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", "http://localhost:11434/v1/chat/completions")
        )

        with pytest.raises(GenerationError):
            async for _ in OllamaClient().chat_stream("Q"):
                pass
