# ============================================================================
# api/main.py
# ============================================================================
"""
FastAPI Backend for the Clinical Intake Engine

Runs on port 8000 behind the patient-record dashboard.
Provides REST endpoints for document extraction and lab result management.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from clinical_intake.completion import BaseCompletionClient, create_client
from clinical_intake.config import logging_settings
from clinical_intake.core.batch_orchestrator import LabImportOrchestrator
from clinical_intake.core.extraction_engine import FieldExtractionEngine
from clinical_intake.core.pipeline import import_lab_pdf, process_document, save_patient
from clinical_intake.storage import PatientStore, create_store
from clinical_intake.utils.exceptions import (
    ClinicalIntakeError,
    DocumentReadError,
    PersistenceError,
    RecordNotFoundError,
    RecordValidationError,
)
from clinical_intake.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the completion client and store once, release them on shutdown."""
    setup_logging(
        level=logging_settings.LOG_LEVEL,
        log_file=logging_settings.LOG_FILE,
        format_json=logging_settings.LOG_JSON,
    )

    client = create_client()
    store = create_store()
    app.state.client = client
    app.state.store = store
    app.state.engine = FieldExtractionEngine(client)
    app.state.orchestrator = LabImportOrchestrator(client, store)
    logger.info(f"Clinical intake API ready (model: {client.model_name})")

    try:
        yield
    finally:
        await client.close()
        await store.close()
        logger.info("Clinical intake API shut down")


app = FastAPI(
    title="Clinical Intake Engine API",
    description="API for extracting patient records and lab results from clinical documents",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Dependencies
# ============================================================================

def get_client(request: Request) -> BaseCompletionClient:
    return request.app.state.client


def get_store(request: Request) -> PatientStore:
    return request.app.state.store


def get_engine(request: Request) -> FieldExtractionEngine:
    return request.app.state.engine


def get_orchestrator(request: Request) -> LabImportOrchestrator:
    return request.app.state.orchestrator


# ============================================================================
# Models
# ============================================================================

class LabResultUpdate(BaseModel):
    """User edits to one lab result; omitted fields stay unchanged."""
    test_date: Optional[str] = None
    test_name: Optional[str] = None
    category: Optional[str] = None
    result_value: Optional[str] = None
    result_unit: Optional[str] = None
    reference_range: Optional[str] = None
    status: Optional[str] = None
    severity: Optional[str] = None


def to_http_error(error: ClinicalIntakeError) -> HTTPException:
    """Map a pipeline error to its HTTP status."""
    if isinstance(error, DocumentReadError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, RecordValidationError):
        return HTTPException(
            status_code=422,
            detail={"message": str(error), "missing_fields": error.missing_fields},
        )
    if isinstance(error, PersistenceError):
        return HTTPException(status_code=502, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/")
async def root():
    return {"status": "ok", "service": "Clinical Intake Engine API"}


@app.get("/api/health")
async def health(client: BaseCompletionClient = Depends(get_client)):
    """Health check for monitoring."""
    completion = await client.health_check()
    return {
        "status": "healthy",
        "completion": completion,
        "statistics": client.get_statistics(),
    }


@app.post("/api/patients/extract")
async def extract_patient(
    file: UploadFile = File(...),
    persist: bool = Form(False),
    patient_id: Optional[str] = Form(None),
    engine: FieldExtractionEngine = Depends(get_engine),
    store: PatientStore = Depends(get_store),
):
    """
    Extract a patient record from an uploaded Word, PDF or text document.

    The record is returned for review. With persist=true it is also saved:
    created, or merged into `patient_id` when given.
    """
    content = await file.read()
    filename = file.filename or ""
    logger.info(f"Extracting patient record from {filename or 'upload'} ({len(content)} bytes)")

    try:
        result = await process_document(content, file.content_type, engine, filename=filename)
    except DocumentReadError as e:
        logger.warning(f"Document rejected: {e}")
        raise to_http_error(e)

    response: Dict[str, Any] = result.to_dict()
    response["patient"] = None

    if persist:
        try:
            response["patient"] = await save_patient(result.record, store, patient_id)
        except PersistenceError as e:
            logger.error(f"Saving extracted patient failed: {e}")
            raise to_http_error(e)

    return response


@app.get("/api/patients/{patient_id}")
async def get_patient(patient_id: str, store: PatientStore = Depends(get_store)):
    try:
        return await store.get_patient_by_id(patient_id)
    except PersistenceError as e:
        raise to_http_error(e)


@app.post("/api/patients/{patient_id}/labs/import")
async def import_labs(
    patient_id: str,
    file: UploadFile = File(...),
    orchestrator: LabImportOrchestrator = Depends(get_orchestrator),
):
    """
    Import every lab test of an uploaded lab report for one patient.

    Partial success is normal: the summary lists what was imported and
    which chunks were skipped.
    """
    content = await file.read()
    filename = file.filename or ""

    try:
        summary = await import_lab_pdf(
            content,
            patient_id,
            orchestrator,
            filename=filename,
            mime_type=file.content_type,
        )
    except DocumentReadError as e:
        logger.warning(f"Lab report rejected: {e}")
        raise to_http_error(e)

    return summary.to_dict()


@app.get("/api/patients/{patient_id}/labs")
async def list_labs(patient_id: str, store: PatientStore = Depends(get_store)):
    """Lab results of a patient, newest test date first."""
    try:
        records = await store.get_lab_results(patient_id)
    except PersistenceError as e:
        raise to_http_error(e)
    return {"patient_id": patient_id, "results": [r.to_dict() for r in records]}


@app.put("/api/labs/{lab_id}")
async def update_lab(
    lab_id: str,
    update: LabResultUpdate,
    store: PatientStore = Depends(get_store),
):
    """Apply user edits; status and severity follow an edited value or range."""
    try:
        record = await store.update_lab_result(lab_id, update.model_dump(exclude_none=True))
    except PersistenceError as e:
        raise to_http_error(e)
    return record.to_dict()


@app.delete("/api/labs/{lab_id}")
async def delete_lab(lab_id: str, store: PatientStore = Depends(get_store)):
    try:
        await store.delete_lab_result(lab_id)
    except PersistenceError as e:
        raise to_http_error(e)
    return {"success": True, "id": lab_id}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
