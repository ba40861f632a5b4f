from docextract.config.settings import Settings
from docextract.extraction.base import BaseTextExtractor
from docextract.extraction.docx_adapter import DocxAdapter
from docextract.extraction.local_extractor import LocalTextExtractor
from docextract.extraction.pdfplumber_adapter import PdfPlumberAdapter
from docextract.extraction.pymupdf_adapter import PyMuPdfAdapter


class TextExtractorFactory:
    """Creates the local text extractor with the PDF engine chosen in settings."""

    PDF_ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create_pdf_extractor(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ADAPTERS)}"
            )
        return adapter_cls()

    @classmethod
    def create(cls, settings: Settings) -> LocalTextExtractor:
        return LocalTextExtractor(
            pdf_extractor=cls.create_pdf_extractor(settings),
            docx_extractor=DocxAdapter(),
        )
