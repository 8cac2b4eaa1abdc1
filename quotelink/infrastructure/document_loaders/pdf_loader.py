from pathlib import Path

from pypdf import PdfReader

from quotelink.core.models.document import Fragment


class PDFLoader:
    """One fragment per text run, in extraction order."""

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".pdf"

    def load(self, file_path: Path) -> list[list[Fragment]]:
        reader = PdfReader(file_path)
        pages = []
        for page in reader.pages:
            fragments: list[Fragment] = []

            def visit(text, cm, tm, font_dict, font_size, fragments=fragments):
                # Text matrix origin locates the run on the rendered page.
                handle = (round(tm[4], 2), round(tm[5], 2)) if tm else None
                fragments.append(Fragment(text=text, index=len(fragments), handle=handle))

            page.extract_text(visitor_text=visit)
            pages.append(fragments)
        return pages
