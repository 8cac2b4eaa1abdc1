"""Highlight service - scroll/highlight state machine."""

import asyncio
import logging
from enum import Enum
from typing import Optional

from ..models.document import Location
from ..protocols.visual import VisualLayerProtocol
from .fragment_store import FragmentStore
from .locator import locate

logger = logging.getLogger(__name__)


class HighlightState(Enum):
    """Highlight state machine states."""
    IDLE = "idle"
    SCANNING = "scanning"
    APPLIED = "applied"


class HighlightService:
    """Turns located quotes into scroll and highlight commands.

    Owns the single active highlight. Every new quote clears the previous
    highlight before anything else happens, and the latest quote always
    wins: a request superseded while it waits for the scroll to settle or
    for its page to render issues no further commands.
    """

    def __init__(
        self,
        store: FragmentStore,
        visual: VisualLayerProtocol,
        scroll_settle_delay: float = 0.3,
    ):
        """Initialize highlight service.

        Args:
            store: Fragment store of the active document.
            visual: Visual layer receiving commands.
            scroll_settle_delay: Seconds between scroll and highlight.
        """
        self._store = store
        self._visual = visual
        self._scroll_settle_delay = scroll_settle_delay

        self._state = HighlightState.IDLE
        self._location: Optional[Location] = None
        self._marked = False
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> HighlightState:
        return self._state

    @property
    def location(self) -> Optional[Location]:
        """Active location, or None."""
        return self._location

    @property
    def is_marked(self) -> bool:
        """Whether the active location is visibly highlighted."""
        return self._marked

    async def show_quote(self, quote: str) -> Optional[Location]:
        """Locate quote, scroll to it and highlight it.

        Args:
            quote: Quote to ground.

        Returns:
            Location of the quote, or None if it was not found, the
            request was superseded before locating, or the deferred page
            came back without the quote.
        """
        self._generation += 1
        generation = self._generation

        await self._clear()
        if generation != self._generation:
            return None

        self._state = HighlightState.SCANNING
        location = locate(quote, self._store)
        if location is None:
            self._state = HighlightState.IDLE
            return None

        self._state = HighlightState.APPLIED
        self._location = location

        await self._visual.scroll_into_view(location.page_number)
        if generation != self._generation:
            return location

        await asyncio.sleep(self._scroll_settle_delay)
        if generation != self._generation:
            return location

        while not self._store.is_ready(location.page_number):
            logger.debug(
                f"Page {location.page_number} not ready, deferring highlight"
            )
            ready = await self._store.wait_until_ready(location.page_number)
            if generation != self._generation:
                return location
            if not ready:
                return self._drop(quote)

            # Re-indexing replaced the fragment list; old indices are void.
            relocated = locate(quote, self._store)
            if relocated is None:
                return self._drop(quote)
            self._location = relocated
            if relocated.page_number != location.page_number:
                await self._visual.scroll_into_view(relocated.page_number)
                if generation != self._generation:
                    return relocated
            location = relocated

        fragments = self._store.get_page(location.page_number) or ()
        await self._visual.apply_highlight(
            location, fragments[location.first_fragment : location.last_fragment + 1]
        )
        if generation == self._generation:
            self._marked = True
        return location

    def request_quote(self, quote: str) -> asyncio.Task:
        """Schedule show_quote, superseding any pending request."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(self.show_quote(quote))
        self._task.add_done_callback(self._log_failure)
        return self._task

    async def join(self) -> None:
        """Wait for the pending request, if any."""
        if self._task is not None:
            await asyncio.wait([self._task])

    async def reset(self) -> None:
        """Drop pending work and any highlight (document reload)."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        await self._clear()

    def _drop(self, quote: str) -> None:
        logger.info(f"Dropping deferred highlight: '{quote[:50]}'")
        self._state = HighlightState.IDLE
        self._location = None
        return None

    @staticmethod
    def _log_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Highlight request failed: {error}", exc_info=error)

    async def _clear(self) -> None:
        # State changes before the await; a newer request may run meanwhile.
        self._state = HighlightState.IDLE
        if self._location is not None:
            self._location = None
            self._marked = False
            await self._visual.clear_highlight()
