import logging
from typing import Any, AsyncIterator

from openai import AsyncOpenAI, OpenAIError

from quotelink.core.exceptions import GenerationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert academic assistant.

Accuracy:
- When a document is provided, rely strictly on its text. Do not invent content.
- Quotes must be copied verbatim from the document, character for character.

Format:
- Follow the requested output format exactly."""


class OllamaClient:
    """LLM client for Ollama (OpenAI-compatible API)."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434/v1",
        model: str = "qwen2.5:7b",
        max_tokens: int = 1024,
        temperature: float = 0.1,
        api_key: str = "ollama",
    ):
        """Initialize Ollama client.

        Args:
            base_url: Ollama API URL.
            model: Model name.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
            api_key: API key (ignored by Ollama).
        """
        self._client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        schema_name: str = "response",
    ) -> str:
        """Generate a complete response.

        Args:
            prompt: Prompt text.
            schema: JSON schema for structured output. None means free text.
            schema_name: Name attached to the schema.

        Returns:
            Response text.

        Raises:
            GenerationError: API call failed.
        """
        kwargs: dict[str, Any] = {}
        if schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": schema},
            }

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                **kwargs,
            )
        except OpenAIError as e:
            raise GenerationError(str(e)) from e

        content = response.choices[0].message.content
        if content is None:
            raise GenerationError("Model returned an empty response")

        logger.debug(f"[generate] {len(content)} chars for schema={schema_name if schema else None}")
        return content

    async def chat_stream(
        self,
        prompt: str,
        system_prompt: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream chat response.

        Args:
            prompt: User prompt.
            system_prompt: System instruction. Defaults to SYSTEM_PROMPT.

        Yields:
            Response tokens.
        """
        messages = [
            {"role": "system", "content": system_prompt or SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                stream=True,
            )

            async for chunk in response:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except OpenAIError as e:
            logger.error(f"[stream] Stream error: {e}")
            raise GenerationError(str(e)) from e
