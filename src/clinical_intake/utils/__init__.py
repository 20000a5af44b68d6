# ============================================================================
# src/clinical_intake/utils/__init__.py
# ============================================================================
"""
Utility modules for the clinical intake engine.
"""

from .exceptions import (
    ClinicalIntakeError,
    DocumentReadError,
    UnsupportedDocumentError,
    ConfigurationError,
    ExtractionError,
    ExtractionTimeoutError,
    ExtractionParseError,
    CompletionRequestError,
    PersistenceError,
    RecordNotFoundError,
    RecordValidationError,
)

from .logging import (
    setup_logging,
    LogContext,
    log_performance,
)

__all__ = [
    # Exceptions
    'ClinicalIntakeError',
    'DocumentReadError',
    'UnsupportedDocumentError',
    'ConfigurationError',
    'ExtractionError',
    'ExtractionTimeoutError',
    'ExtractionParseError',
    'CompletionRequestError',
    'PersistenceError',
    'RecordNotFoundError',
    'RecordValidationError',
    # Logging
    'setup_logging',
    'LogContext',
    'log_performance',
]
