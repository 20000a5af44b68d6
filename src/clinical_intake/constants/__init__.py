# ============================================================================
# src/clinical_intake/constants/__init__.py
# ============================================================================
"""
Domain constants: lab categories, status/severity enums, accepted documents
"""

from .lab import LabCategory, LabStatus, LabSeverity, LAB_CATEGORY_NAMES
from .document_types import (
    DOCX_MIME_TYPE,
    DOC_MIME_TYPE,
    PDF_MIME_TYPE,
    TEXT_MIME_TYPE,
    ACCEPTED_MIME_TYPES,
    EXTENSION_MIME_TYPES,
)

__all__ = [
    "LabCategory",
    "LabStatus",
    "LabSeverity",
    "LAB_CATEGORY_NAMES",
    "DOCX_MIME_TYPE",
    "DOC_MIME_TYPE",
    "PDF_MIME_TYPE",
    "TEXT_MIME_TYPE",
    "ACCEPTED_MIME_TYPES",
    "EXTENSION_MIME_TYPES",
]
