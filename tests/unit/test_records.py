# ============================================================================
# tests/unit/test_records.py
# ============================================================================
"""
Tests for record dataclasses and summaries
"""

import json

from clinical_intake.constants import LabCategory, LabSeverity, LabStatus
from clinical_intake.records import ImportSummary, LabResultRecord


def sodium(**overrides):
    fields = dict(
        patient_id="p-1",
        test_date="2024-01-15",
        test_name="Sodium",
        result_value="150",
        reference_range="135-145",
        category=LabCategory.BIOCHEMISTRY,
    )
    fields.update(overrides)
    return LabResultRecord(**fields)


class TestLabResultRecord:

    def test_reclassify_returns_copy(self):
        record = sodium()
        classified = record.reclassify()

        assert classified.status == LabStatus.HIGH
        assert classified.severity == LabSeverity.WARNING
        assert record.status == LabStatus.NORMAL

    def test_to_input_has_plain_values(self):
        data = sodium().to_input()

        assert data["category"] == "Biochemistry"
        assert data["status"] == "normal"
        assert "id" not in data
        json.dumps(data)

    def test_from_row(self):
        row = {**sodium().to_input(), "id": "l-1", "category": "Lipids", "result_value": 150}
        record = LabResultRecord.from_row(row)

        assert record.id == "l-1"
        assert record.category == LabCategory.OTHER
        assert record.result_value == "150"

    def test_apply_changes_ignores_non_editable(self):
        record = sodium(id="l-1").apply_changes({"id": "x", "patient_id": "p-2", "result_unit": "mmol/L"})

        assert record.id == "l-1"
        assert record.patient_id == "p-1"
        assert record.result_unit == "mmol/L"
        assert record.status == LabStatus.HIGH


class TestImportSummary:

    def test_message_counts_valid_rows(self):
        summary = ImportSummary(patient_id="p-1", candidate_count=5, invalid_count=1, failed_count=1)
        summary.imported = [sodium(), sodium(test_name="Potassium"), sodium(test_name="Chloride")]

        assert summary.message == "imported 3 of 4 tests"
        assert summary.to_dict()["imported_count"] == 3
