from docextract.extraction.base import BaseTextExtractor
from docextract.extraction.exceptions import TextExtractionError
from docextract.logging.logger import Log

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def is_image_type(mime_type: str) -> bool:
    return mime_type.strip().lower().startswith("image/")


class LocalTextExtractor:
    """Routes a document to the PDF or Word extractor based on its content type.

    Anything else (notably images) is skipped. Extraction failures are logged and
    reported as empty text so the caller can fall through to the AI-only path.
    """

    def __init__(
        self,
        pdf_extractor: BaseTextExtractor,
        docx_extractor: BaseTextExtractor,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._docx_extractor = docx_extractor

    def select(self, mime_type: str, filename: str = "") -> BaseTextExtractor | None:
        normalized = mime_type.strip().lower()
        name = filename.strip().lower()
        if normalized == PDF_MIME_TYPE or (not normalized and name.endswith(".pdf")):
            return self._pdf_extractor
        if normalized == DOCX_MIME_TYPE or name.endswith(".docx"):
            return self._docx_extractor
        return None

    def extract(self, data: bytes, mime_type: str, filename: str = "") -> str:
        extractor = self.select(mime_type, filename)
        if extractor is None:
            Log.debug(f"No local text extractor for {mime_type or filename}; skipping")
            return ""
        try:
            return extractor.extract(data)
        except TextExtractionError as exc:
            Log.warning(f"Local text extraction failed for {filename or mime_type}: {exc}")
            return ""
