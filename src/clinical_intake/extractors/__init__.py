# ============================================================================
# src/clinical_intake/extractors/__init__.py
# ============================================================================
"""
Extraction Module

- Text acquisition from Word, PDF and plain text uploads
- Deterministic pattern-matching extraction of patient fields
"""

from .text_extractor import (
    TextExtractor,
    TextExtractionResult,
    ExtractedPage,
    resolve_mime_type,
)
from .pattern_extractor import PatternExtractor, extract_patterns

__all__ = [
    "TextExtractor",
    "TextExtractionResult",
    "ExtractedPage",
    "resolve_mime_type",
    "PatternExtractor",
    "extract_patterns",
]
