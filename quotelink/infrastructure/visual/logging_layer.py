import logging
from typing import Sequence

from quotelink.core.models.document import Fragment, Location

logger = logging.getLogger(__name__)


class LoggingVisualLayer:
    """Headless visual layer that logs commands and keeps the last mark."""

    def __init__(self):
        self.page_in_view: int | None = None
        self.highlighted: list[Fragment] = []

    async def scroll_into_view(self, page_number: int) -> None:
        self.page_in_view = page_number
        logger.info(f"Scroll to page {page_number}")

    async def apply_highlight(
        self, location: Location, fragments: Sequence[Fragment]
    ) -> None:
        self.highlighted = list(fragments)
        text = "".join(f.text for f in fragments)
        logger.info(
            f"Highlight page {location.page_number} "
            f"[{location.first_fragment}..{location.last_fragment}]: {text[:80]!r}"
        )

    async def clear_highlight(self) -> None:
        self.highlighted = []
        logger.info("Clear highlight")
