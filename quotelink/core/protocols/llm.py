"""LLM protocol for dependency injection."""
from typing import Any, AsyncIterator, Protocol, runtime_checkable


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for the external generative service."""

    async def generate(
        self,
        prompt: str,
        schema: dict[str, Any] | None = None,
        schema_name: str = "response",
    ) -> str:
        """Generate a complete response.

        Args:
            prompt: Prompt text.
            schema: JSON schema the response must follow. None means free text.
            schema_name: Name attached to the schema.

        Returns:
            Raw response text (JSON when a schema is given).

        Raises:
            GenerationError: The service failed.
        """
        ...

    async def chat_stream(
        self,
        prompt: str,
        system_prompt: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream a free-text response.

        Args:
            prompt: User prompt.
            system_prompt: Optional system instruction.

        Yields:
            Response tokens.
        """
        ...
