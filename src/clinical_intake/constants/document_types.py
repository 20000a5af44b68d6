# ============================================================================
# src/clinical_intake/constants/document_types.py
# ============================================================================
"""
Document MIME types accepted by the intake uploader
"""

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME_TYPE = "application/msword"
PDF_MIME_TYPE = "application/pdf"
TEXT_MIME_TYPE = "text/plain"

ACCEPTED_MIME_TYPES = {
    DOCX_MIME_TYPE,
    DOC_MIME_TYPE,
    PDF_MIME_TYPE,
    TEXT_MIME_TYPE,
}

# Browsers and multipart clients often send application/octet-stream;
# the extension decides in that case.
EXTENSION_MIME_TYPES = {
    ".docx": DOCX_MIME_TYPE,
    ".doc": DOC_MIME_TYPE,
    ".pdf": PDF_MIME_TYPE,
    ".txt": TEXT_MIME_TYPE,
}
