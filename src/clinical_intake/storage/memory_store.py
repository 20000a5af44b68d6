# ============================================================================
# src/clinical_intake/storage/memory_store.py
# ============================================================================
"""
In-memory persistence backend.

Used for local runs and tests. Rows live in dicts keyed by a generated UUID;
nothing survives the process.
"""

import copy
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List

from .base import PatientStore, PatientData, patient_payload
from ..records.lab import LabResultRecord
from ..utils.exceptions import RecordNotFoundError


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryPatientStore(PatientStore):
    """Dict-backed PatientStore."""

    def __init__(self):
        super().__init__()
        self._patients: Dict[str, Dict[str, Any]] = {}
        self._labs: Dict[str, LabResultRecord] = {}

    async def create_patient(self, patient: PatientData) -> Dict[str, Any]:
        data = patient_payload(patient)
        now = _now()
        row = {**data, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        self._patients[row["id"]] = row
        self.logger.info(f"Created patient {row['id']}")
        return copy.deepcopy(row)

    async def update_patient(self, patient_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        row = self._patients.get(patient_id)
        if row is None:
            raise RecordNotFoundError(f"Patient {patient_id} not found", patient_id)

        changes = {k: v for k, v in data.items() if k not in ("id", "created_at")}
        row.update(copy.deepcopy(changes))
        row["updated_at"] = _now()
        return copy.deepcopy(row)

    async def get_patient_by_id(self, patient_id: str) -> Dict[str, Any]:
        row = self._patients.get(patient_id)
        if row is None:
            raise RecordNotFoundError(f"Patient {patient_id} not found", patient_id)
        return copy.deepcopy(row)

    async def create_lab_result(self, record: LabResultRecord) -> LabResultRecord:
        now = _now()
        saved = replace(record, id=str(uuid.uuid4()), created_at=now, updated_at=now)
        self._labs[saved.id] = saved
        return saved

    async def update_lab_result(self, lab_id: str, changes: Dict[str, Any]) -> LabResultRecord:
        existing = self._labs.get(lab_id)
        if existing is None:
            raise RecordNotFoundError(f"Lab result {lab_id} not found", lab_id)

        updated = replace(existing.apply_changes(changes), updated_at=_now())
        self._labs[lab_id] = updated
        return updated

    async def delete_lab_result(self, lab_id: str) -> None:
        if self._labs.pop(lab_id, None) is None:
            raise RecordNotFoundError(f"Lab result {lab_id} not found", lab_id)

    async def get_lab_results(self, patient_id: str) -> List[LabResultRecord]:
        rows = [r for r in self._labs.values() if r.patient_id == str(patient_id)]
        return sorted(rows, key=lambda r: r.test_date, reverse=True)
