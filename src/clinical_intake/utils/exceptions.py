# ============================================================================
# src/clinical_intake/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the clinical intake engine.

Fatal:
- DocumentReadError: the uploaded file cannot be turned into text

Retryable (never escape the extraction engine):
- ExtractionTimeoutError, ExtractionParseError, CompletionRequestError

Per-record:
- PersistenceError: raised by stores, isolated per record in batch imports
"""


class ClinicalIntakeError(Exception):
    """Base exception for all clinical intake errors."""
    pass


class DocumentReadError(ClinicalIntakeError):
    """Uploaded document could not be read or decoded."""

    def __init__(self, message: str, filename: str = ""):
        super().__init__(message)
        self.filename = filename


class UnsupportedDocumentError(DocumentReadError):
    """Document type is not one of the accepted MIME types."""

    def __init__(self, message: str, mime_type: str, filename: str = ""):
        super().__init__(message, filename)
        self.mime_type = mime_type


class ConfigurationError(ClinicalIntakeError):
    """Invalid or missing configuration (e.g. API key)."""
    pass


class ExtractionError(ClinicalIntakeError):
    """Error during a single remote extraction attempt."""
    pass


class ExtractionTimeoutError(ExtractionError):
    """Remote extraction attempt exceeded its timeout budget."""

    def __init__(self, message: str, timeout: float):
        super().__init__(message)
        self.timeout = timeout


class ExtractionParseError(ExtractionError):
    """Remote response could not be parsed into JSON."""

    def __init__(self, message: str, content: str = ""):
        super().__init__(message)
        self.content = content


class CompletionRequestError(ExtractionError):
    """Completion endpoint returned non-2xx or the connection failed."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class PersistenceError(ClinicalIntakeError):
    """Error writing to or reading from the persistence collaborator."""
    pass


class RecordNotFoundError(PersistenceError):
    """Requested record does not exist."""

    def __init__(self, message: str, record_id: str):
        super().__init__(message)
        self.record_id = record_id


class RecordValidationError(PersistenceError):
    """Record is missing fields the store requires."""

    def __init__(self, message: str, missing_fields=None):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])
