from pathlib import Path

from docx import Document

from quotelink.core.models.document import Fragment


class DocxLoader:
    """Single page, one fragment per paragraph."""

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".docx"

    def load(self, file_path: Path) -> list[list[Fragment]]:
        doc = Document(file_path)
        fragments = [
            Fragment(text=p.text + "\n", index=i, handle=i)
            for i, p in enumerate(doc.paragraphs)
        ]
        return [fragments]
