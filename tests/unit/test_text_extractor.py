# ============================================================================
# tests/unit/test_text_extractor.py
# ============================================================================
"""
Tests for text acquisition (PDF / Word / plain text)
"""

import io
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from clinical_intake.constants import DOCX_MIME_TYPE, PDF_MIME_TYPE, TEXT_MIME_TYPE
from clinical_intake.extractors.text_extractor import TextExtractor, resolve_mime_type
from clinical_intake.utils.exceptions import DocumentReadError, UnsupportedDocumentError


def make_pdf(pages):
    """Build an in-memory PDF with one list of lines per page"""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            pdf.drawString(72, y, line)
            y -= 18
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@pytest.fixture
def extractor():
    return TextExtractor()


@pytest.fixture
def lab_pdf():
    return make_pdf([
        ["Central Laboratory Report", "Hemoglobin 11.5 g/dL 12.0-15.5"],
        ["Platelets 520 K/uL 150-400"],
    ])


class TestPdf:

    def test_pages_in_order(self, extractor, lab_pdf):
        result = extractor.extract_detailed(lab_pdf, PDF_MIME_TYPE, "labs.pdf")

        assert result.method == "pypdfium2"
        assert result.page_count == 2
        assert "Hemoglobin" in result.pages[0].text
        assert "Platelets" in result.pages[1].text
        assert result.text.index("Hemoglobin") < result.text.index("Platelets")

    def test_pypdf2_fallback(self, extractor, lab_pdf):
        with patch.object(TextExtractor, "_extract_with_pypdfium2", side_effect=RuntimeError("pdfium broke")):
            result = extractor.extract_detailed(lab_pdf, PDF_MIME_TYPE)

        assert result.method == "pypdf2"
        assert "Platelets" in result.text
        assert result.warnings

    def test_corrupt_pdf(self, extractor):
        with pytest.raises(DocumentReadError):
            extractor.extract(b"%PDF-1.4 this is not really a pdf", PDF_MIME_TYPE, "broken.pdf")


class TestWord:

    def test_docx_raw_text(self, extractor):
        fake = SimpleNamespace(value="Name: Jane Roe\nChief Complaint: severe headache", messages=[])
        with patch("mammoth.extract_raw_text", return_value=fake) as mocked:
            text = extractor.extract(b"PK\x03\x04docx", DOCX_MIME_TYPE, "note.docx")

        assert text == "Name: Jane Roe\nChief Complaint: severe headache"
        assert mocked.call_count == 1

    def test_unreadable_docx(self, extractor):
        with patch("mammoth.extract_raw_text", side_effect=ValueError("File is not a zip file")):
            with pytest.raises(DocumentReadError):
                extractor.extract(b"garbage", DOCX_MIME_TYPE, "note.docx")


class TestPlainText:

    def test_utf8_decoding(self, extractor):
        text = extractor.extract("Temperature: 37.2°C".encode("utf-8"), TEXT_MIME_TYPE)
        assert text == "Temperature: 37.2°C"

    def test_invalid_bytes_replaced(self, extractor):
        text = extractor.extract(b"Pulse: 72 \xff", "text/plain; charset=utf-8")
        assert text.startswith("Pulse: 72")
        assert "�" in text

    def test_extract_file(self, extractor, tmp_path):
        path = tmp_path / "note.txt"
        path.write_text("Chief Complaint: cough", encoding="utf-8")
        assert extractor.extract_file(path) == "Chief Complaint: cough"

    def test_missing_file(self, extractor, tmp_path):
        with pytest.raises(DocumentReadError):
            extractor.extract_file(tmp_path / "missing.txt")


class TestTypes:

    def test_unsupported_type(self, extractor):
        with pytest.raises(UnsupportedDocumentError):
            extractor.extract(b"\x89PNG", "image/png", "scan.png")

    def test_empty_document(self, extractor):
        with pytest.raises(DocumentReadError):
            extractor.extract(b"", PDF_MIME_TYPE)

    @pytest.mark.parametrize("mime_type, filename, expected", [
        ("application/pdf", "", PDF_MIME_TYPE),
        ("application/octet-stream", "labs.PDF", PDF_MIME_TYPE),
        ("", "note.docx", DOCX_MIME_TYPE),
        (None, "note.txt", TEXT_MIME_TYPE),
        ("text/markdown", "", TEXT_MIME_TYPE),
        ("image/png", "scan.png", "image/png"),
    ])
    def test_resolve_mime_type(self, mime_type, filename, expected):
        assert resolve_mime_type(mime_type, filename) == expected
