# ============================================================================
# src/clinical_intake/records/lab.py
# ============================================================================
"""
Lab result record
- One row per extracted test
- Status/severity derivable from (result_value, reference_range)
"""

from dataclasses import dataclass, field, asdict, replace
from typing import Any, Dict, List, Optional

from ..constants.lab import LabCategory, LabStatus, LabSeverity
from ..utils.exceptions import RecordValidationError

# Columns a user may edit after import
EDITABLE_FIELDS = (
    "test_date", "test_name", "category", "result_value", "result_unit",
    "reference_range", "status", "severity",
)


@dataclass
class LabResultRecord:
    patient_id: str
    test_date: str
    test_name: str
    result_value: str
    category: LabCategory = LabCategory.OTHER
    result_unit: str = ""
    reference_range: str = ""
    status: LabStatus = LabStatus.NORMAL
    severity: LabSeverity = LabSeverity.NORMAL

    # Assigned by the persistence collaborator
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def reclassify(self) -> "LabResultRecord":
        """
        Copy with status/severity recomputed from value and range.

        Used when a user edits the result value or reference range.
        """
        from ..core.status_classifier import classify

        result = classify(self.result_value, self.reference_range)
        return replace(self, status=result.status, severity=result.severity)

    def apply_changes(self, changes: Dict[str, Any]) -> "LabResultRecord":
        """
        Copy with user edits applied.

        Only editable columns are taken from `changes`. Status and severity
        are recomputed whenever the edited value and range are both numeric.
        """
        from ..core.status_classifier import is_classifiable

        updates: Dict[str, Any] = {
            key: changes[key] for key in EDITABLE_FIELDS
            if changes.get(key) is not None
        }
        try:
            if "category" in updates:
                updates["category"] = LabCategory.coerce(updates["category"])
            if "status" in updates:
                updates["status"] = LabStatus(str(updates["status"]).lower())
            if "severity" in updates:
                updates["severity"] = LabSeverity(str(updates["severity"]).lower())
        except ValueError as e:
            raise RecordValidationError(f"Invalid lab field: {e}", ["status", "severity"])
        if "result_value" in updates:
            updates["result_value"] = str(updates["result_value"])

        record = replace(self, **updates)
        if is_classifiable(record.result_value, record.reference_range):
            record = record.reclassify()
        return record

    def to_input(self) -> Dict[str, Any]:
        """Insert/update payload (no server-managed columns)."""
        return {
            "patient_id": self.patient_id,
            "test_date": self.test_date,
            "test_name": self.test_name,
            "category": LabCategory(self.category).value,
            "result_value": self.result_value,
            "result_unit": self.result_unit,
            "reference_range": self.reference_range,
            "status": LabStatus(self.status).value,
            "severity": LabSeverity(self.severity).value,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update(self.to_input())
        return data

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "LabResultRecord":
        """Build from a stored row (already validated on the way in)."""
        return cls(
            id=row.get("id"),
            patient_id=str(row.get("patient_id", "")),
            test_date=row.get("test_date") or "",
            test_name=row.get("test_name") or "",
            category=LabCategory.coerce(row.get("category")),
            result_value=str(row.get("result_value", "")),
            result_unit=row.get("result_unit") or "",
            reference_range=row.get("reference_range") or "",
            status=LabStatus(row.get("status") or "normal"),
            severity=LabSeverity(row.get("severity") or "normal"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass
class ImportSummary:
    """Outcome of one lab PDF import."""
    patient_id: str
    chunk_count: int = 0
    failed_chunks: List[int] = field(default_factory=list)
    candidate_count: int = 0
    invalid_count: int = 0
    imported: List[LabResultRecord] = field(default_factory=list)
    failed_count: int = 0

    @property
    def valid_count(self) -> int:
        return self.candidate_count - self.invalid_count

    @property
    def imported_count(self) -> int:
        return len(self.imported)

    @property
    def message(self) -> str:
        return f"imported {self.imported_count} of {self.valid_count} tests"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patient_id": self.patient_id,
            "chunk_count": self.chunk_count,
            "failed_chunks": list(self.failed_chunks),
            "candidate_count": self.candidate_count,
            "invalid_count": self.invalid_count,
            "imported_count": self.imported_count,
            "failed_count": self.failed_count,
            "message": self.message,
            "imported": [r.to_dict() for r in self.imported],
        }
