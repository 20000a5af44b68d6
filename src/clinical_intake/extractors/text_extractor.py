# ============================================================================
# src/clinical_intake/extractors/text_extractor.py
# ============================================================================
"""
Text Acquisition

Turns an uploaded document into UTF-8 text.

Extraction by type:
1. Word (.docx): mammoth raw text, formatting dropped
2. PDF: per-page text in page order, pages joined by newlines
   - pypdfium2 first (fast, good Unicode)
   - PyPDF2 as fallback
3. Plain text: decoded as UTF-8 (undecodable bytes replaced)

Reading order inside a PDF page is whatever the PDF library yields; it is
not reconstructed.

Unreadable or corrupt input raises DocumentReadError. No partial text is
returned on failure.
"""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import mammoth
import pypdfium2
import PyPDF2

from ..constants.document_types import (
    ACCEPTED_MIME_TYPES,
    DOC_MIME_TYPE,
    DOCX_MIME_TYPE,
    EXTENSION_MIME_TYPES,
    PDF_MIME_TYPE,
    TEXT_MIME_TYPE,
)
from ..utils.exceptions import DocumentReadError, UnsupportedDocumentError
from ..utils.logging import log_performance

logger = logging.getLogger(__name__)

GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


@dataclass
class ExtractedPage:
    """Text extracted from a single PDF page."""
    page_number: int
    text: str
    char_count: int = 0
    method: str = "unknown"


@dataclass
class TextExtractionResult:
    """Extraction result with metadata."""
    text: str
    mime_type: str
    pages: List[ExtractedPage] = field(default_factory=list)
    method: str = "unknown"
    page_count: int = 0
    warnings: List[str] = field(default_factory=list)


def resolve_mime_type(mime_type: Optional[str], filename: str = "") -> str:
    """
    Pick the effective MIME type.

    A declared accepted type wins; generic or missing types fall back to the
    file extension.
    """
    declared = (mime_type or "").split(";")[0].strip().lower()
    if declared in ACCEPTED_MIME_TYPES:
        return declared

    suffix = Path(filename).suffix.lower() if filename else ""
    if declared in GENERIC_MIME_TYPES and suffix in EXTENSION_MIME_TYPES:
        return EXTENSION_MIME_TYPES[suffix]
    if declared.startswith("text/"):
        return TEXT_MIME_TYPE
    return declared


class TextExtractor:
    """
    Document -> text with a per-type extraction path.

    PDF cascade: pypdfium2 -> PyPDF2.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract(self, data: bytes, mime_type: Optional[str], filename: str = "") -> str:
        """
        Extract text from document bytes.

        Args:
            data: Raw file content
            mime_type: Declared MIME type
            filename: Original file name (used when the MIME type is generic)

        Returns:
            Extracted text

        Raises:
            UnsupportedDocumentError: type not accepted
            DocumentReadError: file unreadable or corrupt
        """
        return self.extract_detailed(data, mime_type, filename).text

    def extract_file(self, path: Union[str, Path], mime_type: Optional[str] = None) -> str:
        """Extract text from a file on disk, guessing the type from its extension."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DocumentReadError(f"Cannot read {path}: {e}", path.name)
        return self.extract(data, mime_type, path.name)

    @log_performance(logger, "text extraction")
    def extract_detailed(
        self,
        data: bytes,
        mime_type: Optional[str],
        filename: str = ""
    ) -> TextExtractionResult:
        """Extract text and report which method produced it."""
        resolved = resolve_mime_type(mime_type, filename)
        if resolved not in ACCEPTED_MIME_TYPES:
            raise UnsupportedDocumentError(
                f"Unsupported document type: {mime_type or 'unknown'}",
                mime_type or "",
                filename,
            )
        if not data:
            raise DocumentReadError("Document is empty", filename)

        self.logger.debug(f"Extracting text from {filename or 'upload'} ({resolved}, {len(data)} bytes)")

        if resolved == PDF_MIME_TYPE:
            result = self._extract_pdf(data, filename)
        elif resolved in (DOCX_MIME_TYPE, DOC_MIME_TYPE):
            result = TextExtractionResult(
                text=self._extract_word(data, filename),
                mime_type=resolved,
                method="mammoth",
            )
        else:
            result = TextExtractionResult(
                text=data.decode("utf-8", errors="replace"),
                mime_type=resolved,
                method="plain",
            )

        self.logger.info(
            f"Extracted {len(result.text)} chars from {filename or 'upload'} via {result.method}"
        )
        return result

    # ------------------------------------------------------------------
    # Word
    # ------------------------------------------------------------------
    def _extract_word(self, data: bytes, filename: str) -> str:
        try:
            result = mammoth.extract_raw_text(io.BytesIO(data))
        except Exception as e:
            raise DocumentReadError(f"Failed to read Word document: {e}", filename)

        for message in getattr(result, "messages", []) or []:
            self.logger.debug(f"mammoth: {message}")
        return result.value or ""

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------
    def _extract_pdf(self, data: bytes, filename: str) -> TextExtractionResult:
        result = TextExtractionResult(text="", mime_type=PDF_MIME_TYPE)

        try:
            text, pages = self._extract_with_pypdfium2(data)
            result.method = "pypdfium2"
        except Exception as e:
            self.logger.warning(f"pypdfium2 failed, trying PyPDF2: {e}")
            result.warnings.append(f"pypdfium2 failed: {e}")

            try:
                text, pages = self._extract_with_pypdf2(data)
                result.method = "pypdf2"
            except Exception as e2:
                self.logger.error(f"PyPDF2 also failed: {e2}")
                raise DocumentReadError(
                    f"Failed to read PDF. pypdfium2: {e}, PyPDF2: {e2}", filename
                )

        result.text = text
        result.pages = pages
        result.page_count = len(pages)
        return result

    def _extract_with_pypdfium2(self, data: bytes) -> Tuple[str, List[ExtractedPage]]:
        """Extract text using pypdfium2."""
        pdf = pypdfium2.PdfDocument(data)
        pages = []

        try:
            for page_num in range(len(pdf)):
                page = pdf[page_num]
                textpage = page.get_textpage()
                text = textpage.get_text_range() or ""
                pages.append(ExtractedPage(
                    page_number=page_num,
                    text=text,
                    char_count=len(text),
                    method="pypdfium2"
                ))
        finally:
            pdf.close()

        return "\n".join(p.text for p in pages), pages

    def _extract_with_pypdf2(self, data: bytes) -> Tuple[str, List[ExtractedPage]]:
        """Extract text using PyPDF2."""
        reader = PyPDF2.PdfReader(io.BytesIO(data))

        if reader.is_encrypted:
            try:
                reader.decrypt("")
            except Exception:
                raise RuntimeError("PDF is encrypted and requires a password")

        pages = []
        for page_num, page in enumerate(reader.pages):
            text = page.extract_text() or ""
            pages.append(ExtractedPage(
                page_number=page_num,
                text=text,
                char_count=len(text),
                method="pypdf2"
            ))

        return "\n".join(p.text for p in pages), pages
