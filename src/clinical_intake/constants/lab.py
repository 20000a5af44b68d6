# ============================================================================
# src/clinical_intake/constants/lab.py
# ============================================================================
"""
Lab result vocabulary
- Closed set of 15 categories
- Status (direction) and severity (distance from range)
"""

from enum import Enum
from typing import List, Optional


class LabCategory(str, Enum):
    COMPLETE_BLOOD_COUNT = "Complete Blood Count"
    LIVER_FUNCTION = "Liver Function"
    KIDNEY_FUNCTION = "Kidney Function"
    COAGULATION = "Coagulation"
    TUMOR_MARKERS = "Tumor Markers"
    INFECTION_MARKERS = "Infection Markers"
    HORMONES = "Hormones"
    URINALYSIS = "Urinalysis"
    BIOCHEMISTRY = "Biochemistry"
    IMMUNOLOGY = "Immunology"
    BLOOD_GAS = "Blood Gas"
    TOXICOLOGY = "Toxicology"
    GENETIC_MOLECULAR = "Genetic & Molecular"
    NUTRITIONAL = "Nutritional"
    OTHER = "Other"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "LabCategory":
        """Map free text onto the closed set; unknown values become Other."""
        if not value:
            return cls.OTHER
        if isinstance(value, cls):
            return value
        wanted = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return cls.OTHER


class LabStatus(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    LOW = "low"
    CRITICAL = "critical"


class LabSeverity(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


LAB_CATEGORY_NAMES: List[str] = [c.value for c in LabCategory]
