# ============================================================================
# tests/unit/test_pipeline.py
# ============================================================================
"""
Tests for the caller-facing pipeline (document -> record, lab PDF -> rows)
"""

import io
import json

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from clinical_intake.constants import TEXT_MIME_TYPE
from clinical_intake.core.batch_orchestrator import LabImportOrchestrator
from clinical_intake.core.extraction_engine import FieldExtractionEngine
from clinical_intake.core.normalizer import normalize
from clinical_intake.core.pipeline import import_lab_pdf, process_document, save_patient
from clinical_intake.records.extraction import ExtractionSource
from clinical_intake.utils.exceptions import DocumentReadError, RecordValidationError


def lab_pdf_bytes():
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    pdf.drawString(72, 720, "Date: 2024-01-15")
    pdf.drawString(72, 700, "Sodium 140 mmol/L 135-145")
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_process_text_document(scripted_client, fast_sleep, sample_admission_text):
    client = scripted_client([json.dumps({"full_name": "Jane Roe", "chief_complaint": "Headache"})])
    engine = FieldExtractionEngine(client, sleep=fast_sleep)

    result = await process_document(
        sample_admission_text.encode("utf-8"), TEXT_MIME_TYPE, engine, filename="note.txt"
    )

    assert result.source == ExtractionSource.MODEL
    assert result.record.full_name == "Jane Roe"
    assert "Blood Pressure: 150/95" in client.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_blank_document_rejected(scripted_client, fast_sleep):
    client = scripted_client(["{}"])
    engine = FieldExtractionEngine(client, sleep=fast_sleep)

    with pytest.raises(DocumentReadError):
        await process_document(b"  \n\n ", TEXT_MIME_TYPE, engine)

    assert client.calls == []


@pytest.mark.asyncio
async def test_unsupported_document_rejected(scripted_client, fast_sleep):
    engine = FieldExtractionEngine(scripted_client(["{}"]), sleep=fast_sleep)
    with pytest.raises(DocumentReadError):
        await process_document(b"\x89PNG", "image/png", engine, filename="scan.png")


@pytest.mark.asyncio
async def test_import_lab_pdf(scripted_client, fast_sleep, memory_store):
    row = {
        "test_date": "2024-01-15",
        "test_name": "Sodium",
        "category": "Biochemistry",
        "result_value": "140",
        "result_unit": "mmol/L",
        "reference_range": "135-145",
    }
    client = scripted_client([json.dumps([row])])
    orchestrator = LabImportOrchestrator(client, memory_store, sleep=fast_sleep)

    summary = await import_lab_pdf(lab_pdf_bytes(), "p-1", orchestrator, filename="labs.pdf")

    assert summary.message == "imported 1 of 1 tests"
    assert "Sodium 140" in client.calls[0]["prompt"]
    assert len(await memory_store.get_lab_results("p-1")) == 1


@pytest.mark.asyncio
async def test_save_patient_create_and_update(memory_store):
    record = normalize({"full_name": "Jane Roe", "gender": "Female", "date_of_birth": "1962-03-15"})
    created = await save_patient(record, memory_store)

    sparse = normalize({"chief_complaint": "Follow-up"})
    updated = await save_patient(sparse, memory_store, patient_id=created["id"])

    assert updated["full_name"] == "Jane Roe"
    assert updated["chief_complaint"] == "Follow-up"


@pytest.mark.asyncio
async def test_save_patient_validation_surfaces(memory_store):
    with pytest.raises(RecordValidationError):
        await save_patient(normalize({"chief_complaint": "Headache"}), memory_store)
