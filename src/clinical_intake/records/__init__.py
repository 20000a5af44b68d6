# ============================================================================
# src/clinical_intake/records/__init__.py
# ============================================================================
"""
Record types flowing out of the extraction pipeline
"""

from .patient import (
    PatientRecord,
    VitalSigns,
    PastMedicalHistory,
    FamilyHistory,
    ParentStatus,
    Habits,
    NeurologicalExamination,
    CustomCondition,
    TreatmentItem,
    VaccinationItem,
    AllergyItem,
    SurgeryItem,
    DrugUseItem,
    HISTORY_FLAGS,
)
from .lab import LabResultRecord, ImportSummary
from .extraction import ExtractionResult, ExtractionSource

__all__ = [
    "PatientRecord",
    "VitalSigns",
    "PastMedicalHistory",
    "FamilyHistory",
    "ParentStatus",
    "Habits",
    "NeurologicalExamination",
    "CustomCondition",
    "TreatmentItem",
    "VaccinationItem",
    "AllergyItem",
    "SurgeryItem",
    "DrugUseItem",
    "HISTORY_FLAGS",
    "LabResultRecord",
    "ImportSummary",
    "ExtractionResult",
    "ExtractionSource",
]
