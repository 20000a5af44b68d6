# ============================================================================
# src/clinical_intake/core/pipeline.py
# ============================================================================
"""
Caller-facing pipeline API

- process_document(): upload -> text -> extraction engine -> PatientRecord
- import_lab_pdf():   lab PDF -> text -> chunked extraction -> persisted labs
- save_patient():     persist one extracted record (errors surface)

Text acquisition failures (DocumentReadError) abort the pipeline before any
model call. Everything after that degrades instead of raising, except the
single-record persistence in save_patient().
"""

import asyncio
import contextvars
import logging
from typing import Any, Dict, Optional

from .batch_orchestrator import LabImportOrchestrator
from .extraction_engine import FieldExtractionEngine
from ..constants.document_types import PDF_MIME_TYPE
from ..extractors.text_extractor import TextExtractor
from ..records.extraction import ExtractionResult
from ..records.lab import ImportSummary
from ..records.patient import PatientRecord
from ..storage.base import PatientStore
from ..utils.exceptions import DocumentReadError
from ..utils.logging import LogContext

logger = logging.getLogger(__name__)


async def acquire_text(
    data: bytes,
    mime_type: Optional[str],
    filename: str = "",
    text_extractor: Optional[TextExtractor] = None
) -> str:
    """Run text acquisition off the event loop."""
    extractor = text_extractor or TextExtractor()
    loop = asyncio.get_running_loop()
    context = contextvars.copy_context()
    return await loop.run_in_executor(
        None, context.run, extractor.extract, data, mime_type, filename
    )


async def process_document(
    data: bytes,
    mime_type: Optional[str],
    engine: FieldExtractionEngine,
    filename: str = "",
    text_extractor: Optional[TextExtractor] = None
) -> ExtractionResult:
    """
    Turn one uploaded document into a normalized patient record.

    Args:
        data: File content
        mime_type: Declared MIME type
        engine: Field extraction engine (owns the completion client)
        filename: Original file name
        text_extractor: Override for tests

    Returns:
        ExtractionResult; the record is new and never merged into stored data

    Raises:
        DocumentReadError: document could not be read
    """
    with LogContext(logger, filename=filename):
        text = await acquire_text(data, mime_type, filename, text_extractor)
        if not text.strip():
            raise DocumentReadError("No text could be extracted from the document", filename)

        logger.info(f"Extracted text content length: {len(text)}")
        return await engine.extract_patient(text)


async def import_lab_pdf(
    data: bytes,
    patient_id: str,
    orchestrator: LabImportOrchestrator,
    filename: str = "",
    mime_type: Optional[str] = PDF_MIME_TYPE,
    text_extractor: Optional[TextExtractor] = None
) -> ImportSummary:
    """
    Import all lab tests of a report for one patient.

    Persists as it goes; see ImportSummary for partial success.

    Raises:
        DocumentReadError: document could not be read
    """
    with LogContext(logger, filename=filename, patient_id=str(patient_id)):
        text = await acquire_text(data, mime_type, filename, text_extractor)
        logger.info(f"Extracted text length: {len(text)}")
        return await orchestrator.import_text(text, patient_id)


async def save_patient(
    record: PatientRecord,
    store: PatientStore,
    patient_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Persist an extracted record: create a patient, or update an existing one.

    Updates only carry the fields the extraction populated, so stored values
    are not blanked by a sparse document.

    Raises:
        PersistenceError: propagated to the caller
    """
    if patient_id:
        data = record.to_dict()
        changes = {name: data[name] for name in record.populated_fields()}
        return await store.update_patient(patient_id, changes)
    return await store.create_patient(record)
