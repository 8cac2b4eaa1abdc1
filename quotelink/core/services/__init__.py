"""Core business services."""
from .fragment_store import FragmentStore
from .locator import locate
from .highlight_service import HighlightService, HighlightState
from .grounding_service import GroundingService
from .document_service import DocumentService
from .review_service import ReviewService
from .reader_session import ReaderSession, ReaderSessionFactory

__all__ = [
    "FragmentStore",
    "locate",
    "HighlightService",
    "HighlightState",
    "GroundingService",
    "DocumentService",
    "ReviewService",
    "ReaderSession",
    "ReaderSessionFactory",
]
