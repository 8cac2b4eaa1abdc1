from pathlib import Path

from quotelink.core.models.document import Fragment


class TextLoader:
    """Pages split on form feeds, one fragment per line."""

    EXTENSIONS = {".txt", ".md", ".markdown"}

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.EXTENSIONS

    def load(self, file_path: Path) -> list[list[Fragment]]:
        text = file_path.read_text(encoding="utf-8")
        return [
            [
                Fragment(text=line, index=i, handle=i)
                for i, line in enumerate(page.splitlines(keepends=True))
            ]
            for page in text.split("\f")
        ]
