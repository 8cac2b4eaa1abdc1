"""Document exporters."""
from .docx_exporter import feedback_to_docx, plan_to_docx

__all__ = ["feedback_to_docx", "plan_to_docx"]
