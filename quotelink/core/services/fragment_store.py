"""Fragment store - per-page ordered text fragments."""

import asyncio
import logging
from dataclasses import replace
from typing import Iterable, Optional

from ..models.document import Fragment, Page, PageStatus

logger = logging.getLogger(__name__)


class FragmentStore:
    """Ordered fragment lists for every page of the active document.

    Pages may be indexed in any order as they finish rendering. Re-indexing a
    page replaces its fragment list atomically.
    """

    def __init__(self, page_count: int = 0):
        self._page_count = 0
        self._pages: dict[int, Page] = {}
        self._ready: dict[int, asyncio.Event] = {}
        self.reset(page_count)

    @property
    def page_count(self) -> int:
        return self._page_count

    def reset(self, page_count: int) -> None:
        """Discard all pages and start a document with page_count pages."""
        if page_count < 0:
            raise ValueError(f"Invalid page count: {page_count}")
        # Wake waiters of the previous document; they see no page and give up.
        for event in self._ready.values():
            event.set()
        self._page_count = page_count
        self._pages = {}
        self._ready = {}

    def index_page(
        self, page_number: int, fragments: Iterable[Fragment | str]
    ) -> Page:
        """Replace the page's fragments and mark it ready.

        Args:
            page_number: 1-based page number.
            fragments: Fragments (or bare texts) in reading order.

        Returns:
            The indexed page.
        """
        self._check_page_number(page_number)

        indexed = tuple(
            self._stamp(fragment, position)
            for position, fragment in enumerate(fragments)
        )
        page = Page(number=page_number, fragments=indexed, status=PageStatus.READY)
        self._pages[page_number] = page
        self._event(page_number).set()

        logger.debug(f"Indexed page {page_number}: {len(indexed)} fragments")
        return page

    def mark_not_ready(self, page_number: int) -> None:
        """Flag a page as re-rendering; its fragments stay readable."""
        self._check_page_number(page_number)
        page = self._pages.get(page_number)
        if page is not None:
            page.status = PageStatus.NOT_READY
        self._event(page_number).clear()

    def get_page(self, page_number: int) -> Optional[tuple[Fragment, ...]]:
        """Current fragments of a page, or None if not yet indexed."""
        page = self._pages.get(page_number)
        return page.fragments if page is not None else None

    def is_ready(self, page_number: int) -> bool:
        page = self._pages.get(page_number)
        return page is not None and page.status is PageStatus.READY

    async def wait_until_ready(self, page_number: int) -> bool:
        """Wait until the page is ready.

        Returns:
            False if the document was reset while waiting.
        """
        event = self._event(page_number)
        await event.wait()
        return self.is_ready(page_number)

    def indexed_pages(self) -> list[int]:
        return sorted(self._pages)

    def page_text(self, page_number: int) -> str:
        page = self._pages.get(page_number)
        return page.text if page is not None else ""

    def document_text(self) -> str:
        """Flattened text of all indexed pages, separated by blank lines."""
        return "\n\n".join(self.page_text(n) for n in self.indexed_pages())

    def _event(self, page_number: int) -> asyncio.Event:
        if page_number not in self._ready:
            self._ready[page_number] = asyncio.Event()
        return self._ready[page_number]

    def _check_page_number(self, page_number: int) -> None:
        if not 1 <= page_number <= self._page_count:
            raise ValueError(
                f"Page {page_number} out of range 1..{self._page_count}"
            )

    @staticmethod
    def _stamp(fragment: Fragment | str, position: int) -> Fragment:
        if isinstance(fragment, str):
            return Fragment(text=fragment, index=position)
        if fragment.index != position:
            return replace(fragment, index=position)
        return fragment
