# ============================================================================
# src/clinical_intake/core/__init__.py
# ============================================================================
"""
Core components for the clinical intake engine.

The engine, orchestrator and pipeline modules depend on the completion,
extractor and storage packages; import them from their modules directly
(clinical_intake.core.extraction_engine, ...).
"""

from .parsing import parse_float, parse_annotated_number, parse_reference_range, canonical_date
from .status_classifier import Classification, classify, is_classifiable
from .json_parsing import parse_model_json, OBJECT, ARRAY
from .retry import ExtractionAttempt, retry_with_timeouts
from .normalizer import canonical_keys, normalize, normalize_lab_row, is_valid_lab_row

__all__ = [
    "parse_float",
    "parse_annotated_number",
    "parse_reference_range",
    "canonical_date",
    "Classification",
    "classify",
    "is_classifiable",
    "parse_model_json",
    "OBJECT",
    "ARRAY",
    "ExtractionAttempt",
    "retry_with_timeouts",
    "canonical_keys",
    "normalize",
    "normalize_lab_row",
    "is_valid_lab_row",
]
