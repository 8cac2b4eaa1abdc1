"""Tests for reader sessions."""

import pytest

from quotelink.core.exceptions import DocumentLoadError, InvalidRequestError
from quotelink.core.models.chat import Role
from quotelink.core.models.document import Location
from quotelink.core.services.document_service import DocumentService
from quotelink.core.services.reader_session import (
    DOCUMENT_LOADED_GREETING,
    ReaderSession,
    ReaderSessionFactory,
)
from tests.conftest import RecordingVisualLayer, grounded


@pytest.fixture
def session(llm, visual):
    return ReaderSession(
        llm, DocumentService(), visual, scroll_settle_delay=0, llm_timeout=1.0
    )


@pytest.fixture
def paper(tmp_path):
    path = tmp_path / "paper.txt"
    path.write_text("Abstract\nWe study foxes.\n\fThe quick brown fox jumps.\n", encoding="utf-8")
    return path


class TestLoad:
    """Tests for loading documents."""

    @pytest.mark.asyncio
    async def test_load_greets(self, session, paper):
        document = await session.load(paper)

        assert document.page_count == 2
        assert session.document is document
        assert [(m.role, m.text) for m in session.history] == [
            (Role.MODEL, DOCUMENT_LOADED_GREETING)
        ]

    @pytest.mark.asyncio
    async def test_reload_discards_previous_state(self, llm, session, paper, tmp_path, visual):
        """A new document should drop the old highlight and conversation."""
        await session.load(paper)
        llm.generate.return_value = grounded("Quick.", "quick brown")
        await session.ask("How fast?")
        await session.highlights.join()

        other = tmp_path / "other.txt"
        other.write_text("Something else entirely.\n", encoding="utf-8")
        await session.load(other)

        assert visual.commands[-1] == ("clear",)
        assert session.highlights.location is None
        assert len(session.history) == 1
        assert session.store.page_count == 1
        assert session.store.page_text(1) == "Something else entirely.\n"

    @pytest.mark.asyncio
    async def test_failed_load_leaves_no_document(self, session, paper, tmp_path):
        await session.load(paper)
        broken = tmp_path / "broken.docx"
        broken.write_bytes(b"garbage")

        with pytest.raises(DocumentLoadError):
            await session.load(broken)

        assert session.document is None
        assert session.store.page_count == 0
        with pytest.raises(InvalidRequestError, match="upload a document"):
            await session.ask("Anything?")


class TestAsk:
    """Tests for asking questions."""

    @pytest.mark.asyncio
    async def test_ask_before_load(self, session, llm):
        with pytest.raises(InvalidRequestError, match="upload a document"):
            await session.ask("Anything?")
        llm.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_question(self, session, paper, llm):
        await session.load(paper)

        with pytest.raises(InvalidRequestError, match="enter a question"):
            await session.ask("   ")
        llm.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_answer_highlights_quote(self, session, paper, llm, visual):
        await session.load(paper)
        llm.generate.return_value = grounded("It jumps.", "brown fox jumps")

        message = await session.ask("  What does the fox do?  ")
        await session.highlights.join()

        assert message.text == "It jumps."
        assert session.history.messages[1].text == "What does the fox do?"
        assert visual.visible_highlight[1] == Location(2, 0, 0)

    @pytest.mark.asyncio
    async def test_focus_earlier_quote(self, session, paper, visual):
        await session.load(paper)

        await session.focus_quote("We study")

        assert visual.visible_highlight[1] == Location(1, 1, 1)


class TestReaderSessionFactory:
    """Tests for ReaderSessionFactory."""

    def test_sessions_are_independent(self, llm):
        factory = ReaderSessionFactory(llm, DocumentService(), scroll_settle_delay=0)

        first = factory.create(RecordingVisualLayer())
        second = factory.create(RecordingVisualLayer())

        assert first.store is not second.store
        assert first.history is not second.history
