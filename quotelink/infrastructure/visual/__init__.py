"""Visual layer implementations."""
from .logging_layer import LoggingVisualLayer

__all__ = ["LoggingVisualLayer"]
