# ============================================================================
# src/clinical_intake/records/extraction.py
# ============================================================================
"""
Single-document extraction outcome
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from .patient import PatientRecord


class ExtractionSource(str, Enum):
    MODEL = "model"        # Remote completion alone
    PATTERN = "pattern"    # Deterministic fallback alone
    MERGED = "merged"      # Model result completed by the fallback


@dataclass
class ExtractionResult:
    record: PatientRecord
    source: ExtractionSource
    attempts: int = 0
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def populated_count(self) -> int:
        return len(self.record.populated_fields())

    @property
    def field_count(self) -> int:
        return len(PatientRecord.__dataclass_fields__)

    @property
    def message(self) -> str:
        return f"extracted {self.populated_count} of {self.field_count} fields"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record": self.record.to_dict(),
            "source": self.source.value,
            "attempts": self.attempts,
            "populated_fields": self.record.populated_fields(),
            "message": self.message,
        }
