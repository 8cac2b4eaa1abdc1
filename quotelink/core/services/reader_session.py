"""Reader session - one document, its highlight and its conversation."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from ..exceptions import DocumentLoadError, InvalidRequestError
from ..models.chat import ChatMessage, ConversationHistory, Role
from ..models.document import LoadedDocument
from ..protocols.llm import LLMProtocol
from ..protocols.visual import VisualLayerProtocol
from .document_service import DocumentService
from .fragment_store import FragmentStore
from .grounding_service import GroundingService
from .highlight_service import HighlightService

logger = logging.getLogger(__name__)

DOCUMENT_LOADED_GREETING = "Document loaded. Ask me anything about its content."


class ReaderSession:
    """Active viewing session.

    Loading a new document discards everything from the previous one:
    fragments, highlight and conversation.
    """

    def __init__(
        self,
        llm: LLMProtocol,
        documents: DocumentService,
        visual: VisualLayerProtocol,
        scroll_settle_delay: float = 0.3,
        llm_timeout: float | None = 120.0,
    ):
        self.store = FragmentStore()
        self.highlights = HighlightService(
            self.store, visual, scroll_settle_delay=scroll_settle_delay
        )
        self.grounding = GroundingService(llm, self.highlights, timeout=llm_timeout)
        self._documents = documents
        self._document: Optional[LoadedDocument] = None

    @property
    def document(self) -> Optional[LoadedDocument]:
        return self._document

    @property
    def history(self) -> ConversationHistory:
        return self.grounding.history

    async def load(self, file_path: str | Path, name: str | None = None) -> LoadedDocument:
        """Replace the session's document.

        Raises:
            DocumentLoadError: The document is unusable; the session is left
                without a document.
        """
        await self.highlights.reset()
        self._document = None
        self.store.reset(0)
        self.grounding.start_conversation()

        try:
            document = await self._documents.load(file_path, self.store, name=name)
        except DocumentLoadError:
            self.store.reset(0)
            raise

        self._document = document
        self.history.add(ChatMessage(role=Role.MODEL, text=DOCUMENT_LOADED_GREETING))
        return document

    async def ask(self, question: str) -> Optional[ChatMessage]:
        """Ask a question about the loaded document."""
        if self._document is None or not self._document.text.strip():
            raise InvalidRequestError("Please upload a document first.")
        if not question.strip():
            raise InvalidRequestError("Please enter a question.")

        return await self.grounding.ask(question.strip(), self._document.text)

    def focus_quote(self, quote: str) -> Optional[asyncio.Task]:
        return self.grounding.focus_quote(quote)


class ReaderSessionFactory:
    """Builds sessions that share the generator and the loaders."""

    def __init__(
        self,
        llm: LLMProtocol,
        documents: DocumentService,
        scroll_settle_delay: float = 0.3,
        llm_timeout: float | None = 120.0,
    ):
        self._llm = llm
        self._documents = documents
        self._scroll_settle_delay = scroll_settle_delay
        self._llm_timeout = llm_timeout

    def create(self, visual: VisualLayerProtocol) -> ReaderSession:
        return ReaderSession(
            llm=self._llm,
            documents=self._documents,
            visual=visual,
            scroll_settle_delay=self._scroll_settle_delay,
            llm_timeout=self._llm_timeout,
        )
