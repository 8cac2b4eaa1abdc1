"""Domain models."""
from .document import Fragment, Page, PageStatus, Location, LoadedDocument
from .chat import Role, ChatMessage, ConversationHistory
from .grounding import GroundedAnswer
from .review import (
    DEFAULT_SECTIONS,
    REVIEW_OPTIONS,
    MethodologyStage,
    MethodologyStep,
    ResearchPlan,
    ReviewMode,
    ReviewOption,
    Theorem,
)

__all__ = [
    "Fragment",
    "Page",
    "PageStatus",
    "Location",
    "LoadedDocument",
    "Role",
    "ChatMessage",
    "ConversationHistory",
    "GroundedAnswer",
    "DEFAULT_SECTIONS",
    "REVIEW_OPTIONS",
    "MethodologyStage",
    "MethodologyStep",
    "ResearchPlan",
    "ReviewMode",
    "ReviewOption",
    "Theorem",
]
