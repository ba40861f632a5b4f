import pymupdf

from docextract.extraction.base import BaseTextExtractor
from docextract.extraction.exceptions import TextExtractionError


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts per-page PDF text using PyMuPDF."""

    def extract(self, data: bytes) -> str:
        try:
            with pymupdf.open(stream=data, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return "\n".join(pages).strip()
        except TextExtractionError:
            raise
        except Exception as exc:
            raise TextExtractionError(f"pymupdf extraction failed: {exc}") from exc
