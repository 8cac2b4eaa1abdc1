"""Document service - loads documents into a fragment store."""

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..exceptions import DocumentLoadError
from ..models.document import LoadedDocument
from .fragment_store import FragmentStore

if TYPE_CHECKING:
    from quotelink.infrastructure.document_loaders import CompositeLoader

logger = logging.getLogger(__name__)


class DocumentService:
    """Extracts page fragments from files and indexes them."""

    def __init__(self, loader: Optional["CompositeLoader"] = None):
        self._loader = loader

    @property
    def loader(self):
        """Lazy load document loader."""
        if self._loader is None:
            from quotelink.infrastructure.document_loaders import CompositeLoader

            self._loader = CompositeLoader()
        return self._loader

    async def load(
        self, file_path: str | Path, store: FragmentStore, name: str | None = None
    ) -> LoadedDocument:
        """Load a document and index every page.

        Extraction runs in a worker thread. The store is only touched once
        extraction succeeded, so a failed load indexes nothing.

        Args:
            file_path: Path to the document.
            store: Store to populate.
            name: Display name. Defaults to the file name.

        Returns:
            Loaded document summary.

        Raises:
            DocumentLoadError: Unsupported or unreadable document.
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise DocumentLoadError(f"File not found: {file_path}")
        if not self.loader.supports(file_path):
            raise DocumentLoadError(
                "Unsupported file type. Please upload a .docx, .pdf or .txt file."
            )

        pages = await asyncio.to_thread(self.loader.load, file_path)

        store.reset(len(pages))
        for page_number, fragments in enumerate(pages, 1):
            store.index_page(page_number, fragments)

        document = LoadedDocument(
            name=name or file_path.name,
            page_count=len(pages),
            text=store.document_text(),
        )
        logger.info(f"Loaded {document.name}: {document.page_count} pages")
        return document
