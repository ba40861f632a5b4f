import pytest

from docextract.extraction.docx_adapter import DocxAdapter
from docextract.extraction.exceptions import TextExtractionError
from docextract.extraction.pdfplumber_adapter import PdfPlumberAdapter
from docextract.extraction.pymupdf_adapter import PyMuPdfAdapter


@pytest.mark.parametrize("adapter_cls", [PdfPlumberAdapter, PyMuPdfAdapter])
class TestPdfAdapters:
    def test_extract_returns_text(self, adapter_cls: type, sample_pdf_bytes: bytes) -> None:
        result = adapter_cls().extract(sample_pdf_bytes)
        assert "Invoice 42 total 19.99" in result

    def test_extract_multi_page(self, adapter_cls: type, multi_page_pdf_bytes: bytes) -> None:
        result = adapter_cls().extract(multi_page_pdf_bytes)
        assert "Page one content" in result
        assert "Page two content" in result

    def test_extract_empty_pdf_returns_empty_string(
        self, adapter_cls: type, empty_pdf_bytes: bytes
    ) -> None:
        assert adapter_cls().extract(empty_pdf_bytes) == ""

    def test_extract_raises_on_invalid_bytes(self, adapter_cls: type) -> None:
        with pytest.raises(TextExtractionError):
            adapter_cls().extract(b"not a pdf")


class TestDocxAdapter:
    def test_extracts_paragraphs_and_tables(self, sample_docx_bytes: bytes) -> None:
        result = DocxAdapter().extract(sample_docx_bytes)

        assert result.splitlines() == ["Quarterly report", "Revenue grew", "Region\tSales", "North\t120"]

    def test_raises_on_invalid_bytes(self) -> None:
        with pytest.raises(TextExtractionError, match="docx extraction failed"):
            DocxAdapter().extract(b"PK not really a zip")
