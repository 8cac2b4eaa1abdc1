"""Protocol interfaces for dependency injection."""
from .llm import LLMProtocol
from .visual import VisualLayerProtocol

__all__ = [
    "LLMProtocol",
    "VisualLayerProtocol",
]
