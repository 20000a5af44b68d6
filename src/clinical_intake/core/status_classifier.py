# ============================================================================
# src/clinical_intake/core/status_classifier.py
# ============================================================================
"""
Lab Status Classifier

Derives status (direction) and severity (distance) from a result value and a
textual reference range:

    within [min, max]              -> normal / normal
    outside by <= 20% of the width -> high|low / normal
    outside by <= 50% of the width -> high|low / warning
    further out                    -> high|low / critical

Boundaries are inclusive. A zero-width range (min == max) has no width to
measure against, so any value outside it is critical.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .parsing import parse_float, parse_reference_range
from ..constants.lab import LabStatus, LabSeverity

WARNING_DEVIATION = 0.2
CRITICAL_DEVIATION = 0.5


@dataclass(frozen=True)
class Classification:
    status: LabStatus = LabStatus.NORMAL
    severity: LabSeverity = LabSeverity.NORMAL


NORMAL = Classification()


def deviation(value: float, low: float, high: float) -> float:
    """Fractional distance outside [low, high]; 0.0 inside."""
    if low <= value <= high:
        return 0.0
    distance = low - value if value < low else value - high
    width = high - low
    if width <= 0:
        return float("inf")
    return distance / width


def classify(value: Any, reference_range: Optional[str]) -> Classification:
    """
    Classify a lab result against its reference range.

    Args:
        value: Result value (number or string, e.g. "25" or "25 mg/dL")
        reference_range: Free-text range, e.g. "10-20"

    Returns:
        Classification; normal/normal when either side is not numeric
    """
    if value is None or value == "" or not reference_range:
        return NORMAL

    numeric = parse_float(value)
    if numeric is None:
        return NORMAL

    bounds = parse_reference_range(reference_range)
    if bounds is None:
        return NORMAL

    low, high = bounds
    if low <= numeric <= high:
        return NORMAL

    status = LabStatus.LOW if numeric < low else LabStatus.HIGH
    dev = deviation(numeric, low, high)

    if dev <= WARNING_DEVIATION:
        return Classification(status, LabSeverity.NORMAL)
    if dev <= CRITICAL_DEVIATION:
        return Classification(status, LabSeverity.WARNING)
    return Classification(status, LabSeverity.CRITICAL)


def is_classifiable(value: Any, reference_range: Optional[str]) -> bool:
    """True when both the value and the range are numeric."""
    return parse_float(value) is not None and parse_reference_range(reference_range) is not None
