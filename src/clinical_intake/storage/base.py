# ============================================================================
# src/clinical_intake/storage/base.py
# ============================================================================
"""
Persistence Collaborator Interface

The pipeline treats persistence as an opaque, injected collaborator with
seven operations:

    create_patient / update_patient / get_patient_by_id
    create_lab_result / update_lab_result / delete_lab_result
    get_lab_results(patient_id)   (newest test date first)

Implementations raise PersistenceError (or a subclass) on failure.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Union

from ..records.lab import LabResultRecord
from ..records.patient import PatientRecord
from ..utils.exceptions import RecordValidationError

# A patient cannot be stored without these
REQUIRED_PATIENT_FIELDS = ("full_name", "gender", "birth_date")

PatientData = Union[PatientRecord, Dict[str, Any]]


def patient_payload(patient: PatientData) -> Dict[str, Any]:
    """Plain dict for a patient, validated for the required fields."""
    data = patient.to_dict() if isinstance(patient, PatientRecord) else dict(patient)
    for key in ("id", "created_at", "updated_at"):
        data.pop(key, None)

    missing = [name for name in REQUIRED_PATIENT_FIELDS if not data.get(name)]
    if missing:
        raise RecordValidationError(
            f"Missing required fields: {', '.join(missing)}", missing
        )
    return data


class PatientStore(ABC):
    """
    Abstract base class for persistence backends.

    All backends must implement the seven CRUD operations below; close()
    releases network resources and is a no-op by default.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def create_patient(self, patient: PatientData) -> Dict[str, Any]:
        """Insert a patient; returns the stored row (with id)."""
        pass

    @abstractmethod
    async def update_patient(self, patient_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Merge `data` into a stored patient; returns the updated row."""
        pass

    @abstractmethod
    async def get_patient_by_id(self, patient_id: str) -> Dict[str, Any]:
        """Fetch one patient. Raises RecordNotFoundError."""
        pass

    @abstractmethod
    async def create_lab_result(self, record: LabResultRecord) -> LabResultRecord:
        """Insert one lab result; returns it with id and timestamps."""
        pass

    @abstractmethod
    async def update_lab_result(self, lab_id: str, changes: Dict[str, Any]) -> LabResultRecord:
        """Apply user edits to one lab result. Raises RecordNotFoundError."""
        pass

    @abstractmethod
    async def delete_lab_result(self, lab_id: str) -> None:
        """Delete one lab result. Raises RecordNotFoundError."""
        pass

    @abstractmethod
    async def get_lab_results(self, patient_id: str) -> List[LabResultRecord]:
        """All lab results of a patient, newest test date first."""
        pass

    async def close(self) -> None:
        return None
