import io

from docx import Document as DocxDocument

from docextract.extraction.base import BaseTextExtractor
from docextract.extraction.exceptions import TextExtractionError


class DocxAdapter(BaseTextExtractor):
    """Extracts raw paragraph and table text from .docx files using python-docx."""

    def extract(self, data: bytes) -> str:
        try:
            document = DocxDocument(io.BytesIO(data))
            lines = [paragraph.text for paragraph in document.paragraphs]
            for table in document.tables:
                for row in table.rows:
                    lines.append("\t".join(cell.text for cell in row.cells))
            return "\n".join(line for line in lines if line.strip()).strip()
        except Exception as exc:
            raise TextExtractionError(f"docx extraction failed: {exc}") from exc
