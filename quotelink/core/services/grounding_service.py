"""Grounding service - ties model answers back to document quotes."""

import asyncio
import itertools
import logging
from typing import Optional

from pydantic import ValidationError

from ..exceptions import GenerationError
from ..models.chat import ChatMessage, ConversationHistory, Role
from ..models.grounding import GroundedAnswer
from ..protocols.llm import LLMProtocol
from .highlight_service import HighlightService

logger = logging.getLogger(__name__)

GROUNDING_PROMPT = """Based *only* on the provided document text, answer the following question.
Your response must be a JSON object.
1. In the 'answer' field, provide a clear, concise answer to the question.
2. In the 'quote' field, provide a short, direct quote from the document that best supports your answer. This quote must be exact.

Question: "{question}"

Document Text:
---
{document_text}
---"""

ERROR_REPLY = "Sorry, I encountered an error: {error}"
MALFORMED_REPLY = "Sorry, the answer came back in an unexpected format. Please try again."


class GroundingService:
    """Sends questions to the generator and grounds the returned quotes.

    Each question gets a request id. A response that arrives after a newer
    question was asked is dropped: it reaches neither the history nor the
    highlight.
    """

    def __init__(
        self,
        llm: LLMProtocol,
        highlights: HighlightService,
        timeout: float | None = 120.0,
    ):
        """Initialize grounding service.

        Args:
            llm: Generative service.
            highlights: Highlight service receiving quotes.
            timeout: Seconds to wait for the generator. None waits forever.
        """
        self._llm = llm
        self._highlights = highlights
        self._timeout = timeout

        self._history = ConversationHistory()
        self._request_ids = itertools.count(1)
        self._latest_request_id = 0

    @property
    def history(self) -> ConversationHistory:
        return self._history

    def start_conversation(self) -> ConversationHistory:
        """Start a fresh history; responses still in flight become stale."""
        self._history = ConversationHistory()
        self._latest_request_id = next(self._request_ids)
        return self._history

    def build_prompt(self, question: str, document_text: str) -> str:
        return GROUNDING_PROMPT.format(question=question, document_text=document_text)

    async def ask(self, question: str, document_text: str) -> Optional[ChatMessage]:
        """Ask a question about the document.

        Args:
            question: User's question.
            document_text: Full document text.

        Returns:
            The model message appended to history, or None if the response
            was superseded by a newer question.
        """
        request_id = next(self._request_ids)
        self._latest_request_id = request_id
        history = self._history
        history.add(ChatMessage(role=Role.USER, text=question))

        quote = ""
        try:
            raw = await asyncio.wait_for(
                self._llm.generate(
                    self.build_prompt(question, document_text),
                    schema=GroundedAnswer.model_json_schema(),
                    schema_name="grounded_answer",
                ),
                timeout=self._timeout,
            )
            grounded = GroundedAnswer.model_validate_json(raw)
            message = ChatMessage(
                role=Role.MODEL, text=grounded.answer, quote=grounded.quote or None
            )
            quote = grounded.quote
        except GenerationError as e:
            logger.error(f"Generator failed for request {request_id}: {e}")
            message = ChatMessage(role=Role.MODEL, text=ERROR_REPLY.format(error=e))
        except asyncio.TimeoutError:
            logger.error(f"Generator timed out for request {request_id}")
            message = ChatMessage(
                role=Role.MODEL,
                text=ERROR_REPLY.format(error="the model did not respond in time."),
            )
        except ValidationError as e:
            logger.warning(
                f"Malformed response for request {request_id}: "
                f"{e.error_count()} validation errors"
            )
            message = ChatMessage(role=Role.MODEL, text=MALFORMED_REPLY)

        if request_id != self._latest_request_id:
            logger.info(
                f"Dropping stale response {request_id} "
                f"(latest {self._latest_request_id})"
            )
            return None

        history.add(message)
        if quote:
            self._highlights.request_quote(quote)
        return message

    def focus_quote(self, quote: str) -> Optional[asyncio.Task]:
        """Highlight the quote of an earlier answer again."""
        if not quote:
            return None
        return self._highlights.request_quote(quote)
