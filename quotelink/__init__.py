"""Quote grounding for document Q&A."""
