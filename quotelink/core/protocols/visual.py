"""Visual layer protocol for dependency injection."""
from typing import Protocol, Sequence, runtime_checkable

from ..models.document import Fragment, Location


@runtime_checkable
class VisualLayerProtocol(Protocol):
    """Commands the highlight service issues to the document view.

    Results are never inspected; every command is a fire-and-forget side
    effect.
    """

    async def scroll_into_view(self, page_number: int) -> None:
        """Bring the page into view."""
        ...

    async def apply_highlight(
        self, location: Location, fragments: Sequence[Fragment]
    ) -> None:
        """Mark the fragments covered by location.

        Args:
            location: Page and fragment range.
            fragments: Fragments in the range, carrying their visual handles.
        """
        ...

    async def clear_highlight(self) -> None:
        """Remove the current mark, if any."""
        ...
