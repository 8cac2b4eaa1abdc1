"""Tests for grounding model answers."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from quotelink.core.exceptions import GenerationError
from quotelink.core.models.chat import Role
from quotelink.core.models.document import Location
from quotelink.core.models.grounding import GroundedAnswer
from quotelink.core.services.grounding_service import MALFORMED_REPLY, GroundingService
from quotelink.core.services.highlight_service import HighlightService
from tests.conftest import grounded, make_store


@pytest.fixture
def store():
    return make_store(["The qu", "ick bro", "wn fox"], ["alpha beta"])


@pytest.fixture
def highlights(store, visual):
    return HighlightService(store, visual, scroll_settle_delay=0)


@pytest.fixture
def service(llm, highlights):
    return GroundingService(llm, highlights, timeout=1.0)


def _gated_generate(gate: asyncio.Event, slow_question: str, replies: dict):
    async def generate(prompt, schema=None, schema_name="response"):
        for question, reply in replies.items():
            if f'Question: "{question}"' in prompt:
                if question == slow_question:
                    await gate.wait()
                return reply
        raise AssertionError("unexpected prompt")

    return generate


class TestAsk:
    """Tests for answering questions."""

    @pytest.mark.asyncio
    async def test_answer_with_quote_is_highlighted(self, llm, service, store, visual, highlights):
        """Quote of a valid answer should be located and highlighted."""
        llm.generate.return_value = grounded("It is quick.", "quick brown")

        message = await service.ask("How is the fox?", store.document_text())
        await highlights.join()

        assert message.role is Role.MODEL
        assert message.text == "It is quick."
        assert message.quote == "quick brown"
        assert visual.visible_highlight[1] == Location(1, 0, 2)

    @pytest.mark.asyncio
    async def test_history_records_pair(self, llm, service, store):
        """Question and answer should be appended in order."""
        llm.generate.return_value = grounded("Beta.", "beta")

        await service.ask("Which letter?", store.document_text())

        assert [(m.role, m.text) for m in service.history] == [
            (Role.USER, "Which letter?"),
            (Role.MODEL, "Beta."),
        ]

    @pytest.mark.asyncio
    async def test_empty_quote_no_highlight(self, llm, service, store, visual, highlights):
        """Answer without quote should not touch the highlight."""
        llm.generate.return_value = grounded("No quote needed.")

        message = await service.ask("Anything?", store.document_text())
        await highlights.join()

        assert message.quote is None
        assert visual.commands == []

    @pytest.mark.asyncio
    async def test_null_quote_treated_as_empty(self, llm, service, store, visual):
        """A null quote should behave like an empty one."""
        llm.generate.return_value = grounded("Answer.", None)

        message = await service.ask("Anything?", store.document_text())

        assert message.text == "Answer."
        assert message.quote is None
        assert visual.commands == []

    @pytest.mark.asyncio
    async def test_unlocatable_quote_keeps_answer(self, llm, service, store, visual, highlights):
        """Answer stays in history even if its quote grounds nowhere."""
        llm.generate.return_value = grounded("Made up.", "not in the document")

        message = await service.ask("Anything?", store.document_text())
        await highlights.join()

        assert message.quote == "not in the document"
        assert service.history.messages[-1] == message
        assert visual.commands == []

    @pytest.mark.asyncio
    async def test_schema_and_prompt(self, llm, service, store):
        """Generator should receive the answer schema and the document."""
        await service.ask("Where is the fox?", store.document_text())

        prompt = llm.generate.call_args.args[0]
        kwargs = llm.generate.call_args.kwargs
        assert 'Question: "Where is the fox?"' in prompt
        assert "The quick brown fox\n\nalpha beta" in prompt
        assert kwargs["schema"] == GroundedAnswer.model_json_schema()
        assert kwargs["schema_name"] == "grounded_answer"


class TestFailures:
    """Tests for generator failures."""

    @pytest.mark.asyncio
    async def test_generation_error_message(self, llm, service, store, visual):
        """Generator error should become an explanatory model message."""
        llm.generate.side_effect = GenerationError("connection refused")

        message = await service.ask("Anything?", store.document_text())

        assert message.role is Role.MODEL
        assert message.text == "Sorry, I encountered an error: connection refused"
        assert message.quote is None
        assert len(service.history) == 2
        assert visual.commands == []

    @pytest.mark.asyncio
    async def test_timeout_message(self, llm, highlights, store):
        """A generator that never answers should time out."""

        async def never(*args, **kwargs):
            await asyncio.sleep(10)

        llm.generate = AsyncMock(side_effect=never)
        service = GroundingService(llm, highlights, timeout=0.01)

        message = await service.ask("Anything?", store.document_text())

        assert "did not respond in time" in message.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        ["not json", '{"quote": "beta"}', '{"answer": 42, "quote": "beta"}', "[]"],
    )
    async def test_malformed_payload(self, llm, service, store, visual, highlights, payload):
        """Malformed payloads should be discarded whole."""
        llm.generate.return_value = payload

        message = await service.ask("Anything?", store.document_text())
        await highlights.join()

        assert message.text == MALFORMED_REPLY
        assert message.quote is None
        assert visual.commands == []


class TestStaleResponses:
    """Tests for responses that arrive after a newer question."""

    @pytest.mark.asyncio
    async def test_stale_response_dropped(self, llm, service, store, visual, highlights):
        """Older response finishing last should be ignored."""
        gate = asyncio.Event()
        llm.generate = AsyncMock(
            side_effect=_gated_generate(
                gate,
                "first",
                {
                    "first": grounded("First.", "quick"),
                    "second": grounded("Second.", "beta"),
                },
            )
        )
        text = store.document_text()

        first = asyncio.create_task(service.ask("first", text))
        await asyncio.sleep(0)
        second = await service.ask("second", text)
        gate.set()

        assert await first is None
        assert second.text == "Second."
        await highlights.join()

        assert [m.text for m in service.history] == ["first", "second", "Second."]
        assert visual.highlights == [("highlight", Location(2, 0, 0), "alpha beta")]

    @pytest.mark.asyncio
    async def test_new_conversation_makes_pending_stale(self, llm, service, store):
        """Starting a conversation should drop answers still in flight."""
        gate = asyncio.Event()
        llm.generate = AsyncMock(
            side_effect=_gated_generate(gate, "old", {"old": grounded("Old.", "beta")})
        )

        pending = asyncio.create_task(service.ask("old", store.document_text()))
        await asyncio.sleep(0)
        history = service.start_conversation()
        gate.set()

        assert await pending is None
        assert len(history) == 0
        assert service.history is history


class TestFocusQuote:
    """Tests for re-focusing an earlier quote."""

    @pytest.mark.asyncio
    async def test_focus_quote(self, service, visual):
        """Focusing should highlight the quote again."""
        task = service.focus_quote("beta")

        assert await task == Location(2, 0, 0)
        assert visual.visible_highlight[2] == "alpha beta"

    def test_focus_empty_quote(self, service):
        """Empty quote should not schedule anything."""
        assert service.focus_quote("") is None
