"""Cross-fragment locator - finds a quote across fragment boundaries."""

import logging
from collections import deque
from typing import Optional, Sequence

from ..models.document import Fragment, Location
from .fragment_store import FragmentStore

logger = logging.getLogger(__name__)


class SlidingBuffer:
    """Concatenated text of the most recent fragments of a page.

    Invariant: ``text`` equals the concatenation of ``fragments``. Once the
    text grows past twice the quote length, trimming keeps the minimal
    suffix of fragments still holding at least quote-length characters, so
    an occurrence that can still complete is never dropped.
    """

    def __init__(self, quote_length: int):
        self._keep = quote_length
        self._limit = 2 * quote_length
        self._fragments: deque[Fragment] = deque()
        self.text = ""

    @property
    def fragments(self) -> tuple[Fragment, ...]:
        return tuple(self._fragments)

    def push(self, fragment: Fragment) -> None:
        self._fragments.append(fragment)
        self.text += fragment.text

    def trim(self) -> None:
        if len(self.text) <= self._limit:
            return
        while self._fragments and len(self.text) - len(self._fragments[0].text) >= self._keep:
            dropped = self._fragments.popleft()
            self.text = self.text[len(dropped.text):]

    def cover(self, start: int, end: int) -> tuple[int, int]:
        """Indices of the first and last fragment covering text[start:end]."""
        first = last = None
        offset = 0
        for fragment in self._fragments:
            fragment_end = offset + len(fragment.text)
            if first is None and fragment_end > start:
                first = fragment.index
            if first is not None and fragment_end >= end:
                last = fragment.index
                break
            offset = fragment_end
        return first, last


def locate(
    quote: str, store: FragmentStore, page_count: Optional[int] = None
) -> Optional[Location]:
    """Find the earliest occurrence of quote in the document.

    Pages are scanned in ascending order with a fresh buffer each, so a
    quote never matches across a page boundary. Matching is exact and
    case-sensitive.

    Args:
        quote: Text to find.
        store: Fragment store of the document.
        page_count: Pages to scan. Defaults to the store's page count.

    Returns:
        Location of the minimal fragment span covering the first match,
        or None.
    """
    if not quote:
        return None

    if page_count is None:
        page_count = store.page_count

    for page_number in range(1, page_count + 1):
        fragments = store.get_page(page_number)
        if fragments is None:
            continue

        location = scan_page(quote, page_number, fragments)
        if location is not None:
            logger.info(
                f"Located '{quote[:50]}' on page {page_number}, fragments "
                f"{location.first_fragment}..{location.last_fragment}"
            )
            return location

    logger.info(f"Quote not found: '{quote[:50]}'")
    return None


def scan_page(
    quote: str, page_number: int, fragments: Sequence[Fragment]
) -> Optional[Location]:
    """Find the first occurrence of quote on one page."""
    buffer = SlidingBuffer(len(quote))

    for fragment in fragments:
        buffer.push(fragment)

        start = buffer.text.find(quote)
        if start != -1:
            first, last = buffer.cover(start, start + len(quote))
            return Location(
                page_number=page_number, first_fragment=first, last_fragment=last
            )

        buffer.trim()

    return None
