"""Document domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PageStatus(Enum):
    """Rendering readiness of a page."""
    NOT_READY = "not_ready"
    READY = "ready"


@dataclass(frozen=True)
class Fragment:
    """Smallest unit of extracted page text."""
    text: str
    index: int
    handle: Optional[Any] = None  # opaque visual reference


@dataclass
class Page:
    """Indexed page of a document."""
    number: int
    fragments: tuple[Fragment, ...] = ()
    status: PageStatus = PageStatus.NOT_READY

    @property
    def text(self) -> str:
        """Flattened page text."""
        return "".join(f.text for f in self.fragments)


@dataclass(frozen=True)
class Location:
    """Contiguous fragment span on one page (inclusive, 0-based)."""
    page_number: int
    first_fragment: int
    last_fragment: int

    @property
    def fragment_range(self) -> range:
        return range(self.first_fragment, self.last_fragment + 1)


@dataclass
class LoadedDocument:
    """Summary of a document loaded into a session."""
    name: str
    page_count: int
    text: str = field(repr=False, default="")
