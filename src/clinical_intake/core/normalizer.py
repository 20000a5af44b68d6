# ============================================================================
# src/clinical_intake/core/normalizer.py
# ============================================================================
"""
Result Normalizer

Maps loosely-typed raw records (model JSON or pattern extractor output) onto
the strict record shapes:

- normalize(raw)                    -> PatientRecord
- normalize_lab_row(row, patient)   -> LabResultRecord

Rules:
- Start from a fully scaffolded PatientRecord, overlay raw values
- Annotated numbers ("98.6°F", "72 bpm") parsed with a leading-numeric regex;
  parse failure keeps the default
- Boolean flags default to False
- Missing arrays become empty lists, list items get "" defaults
- Family history booleans are derived from "source list is non-empty"

Pure functions: no I/O, same input -> same output.
"""

import logging
from typing import Any, Dict, List, Optional

from .parsing import canonical_date, parse_annotated_number
from .status_classifier import classify, is_classifiable
from ..constants.lab import LabCategory, LabSeverity, LabStatus
from ..records.lab import LabResultRecord
from ..records.patient import (
    AllergyItem,
    CustomCondition,
    DrugUseItem,
    FamilyHistory,
    HISTORY_FLAGS,
    Habits,
    NeurologicalExamination,
    ParentStatus,
    PastMedicalHistory,
    PatientRecord,
    SurgeryItem,
    TreatmentItem,
    VaccinationItem,
    VitalSigns,
)

logger = logging.getLogger(__name__)

TRUTHY_STRINGS = {"true", "yes", "y", "1", "present", "positive"}


# ----------------------------------------------------------------------------
# Coercion helpers
# ----------------------------------------------------------------------------

def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return False


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _first(data: Dict[str, Any], *keys: str) -> Any:
    """First present, non-None value among alias keys."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


# Alternate top-level keys models use, mapped to the schema key
RAW_KEY_ALIASES = {
    "security_id": "id_number",
    "birth_date": "date_of_birth",
    "diagnoses": "current_diagnosis",
    "family_history": "family_status",
    "neurological_exam": "neurological_examination",
}


def canonical_keys(raw: Any) -> Dict[str, Any]:
    """
    Shallow copy of `raw` with alias keys renamed to their schema key.

    When both spellings are present the schema key wins unless its value is None.
    """
    raw = _dict(raw)
    result = {key: value for key, value in raw.items() if key not in RAW_KEY_ALIASES}
    for alias, key in RAW_KEY_ALIASES.items():
        if alias in raw and result.get(key) is None:
            result[key] = raw[alias]
    return result


def _number(value: Any, default, integer: bool = False):
    parsed = parse_annotated_number(value, integer=integer)
    return default if parsed is None else parsed


def _names(value: Any) -> List[str]:
    """List of strings from strings or {"name": ...} objects."""
    names = []
    for item in _list(value):
        if isinstance(item, dict):
            name = _text(_first(item, "name", "diagnosis", "disease"))
        else:
            name = _text(item)
        if name:
            names.append(name)
    return names


# ----------------------------------------------------------------------------
# Sections
# ----------------------------------------------------------------------------

def _vital_signs(raw: Any) -> VitalSigns:
    vitals = VitalSigns()
    data = _dict(raw)
    if not data:
        return vitals

    vitals.temperature = _number(data.get("temperature"), vitals.temperature)
    vitals.pulse = _number(data.get("pulse"), vitals.pulse, integer=True)
    vitals.respiration = _number(data.get("respiration"), vitals.respiration, integer=True)
    vitals.blood_pressure = _text(data.get("blood_pressure"))
    vitals.weight = parse_annotated_number(data.get("weight")) or None
    vitals.height = parse_annotated_number(data.get("height")) or None
    return vitals


def _past_medical_history(raw: Any) -> PastMedicalHistory:
    history = PastMedicalHistory()
    data = _dict(raw)

    for key, (category, attribute) in HISTORY_FLAGS.items():
        setattr(getattr(history, category), attribute, _flag(data.get(key)))

    history.vaccination_history = [
        VaccinationItem(
            vaccine_name=_text(_first(item, "vaccine_name", "name")),
            date=canonical_date(item.get("date")),
            notes=_text(item.get("notes")),
        )
        for item in _list(data.get("vaccination_history"))
        if isinstance(item, dict)
    ]
    return history


def _parent(raw: Any) -> ParentStatus:
    data = _dict(raw)
    status = _text(data.get("status")).lower()
    return ParentStatus(
        status="deceased" if status in ("deceased", "dead") else "alive",
        cause=_text(_first(data, "death_reason", "cause")),
    )


def _conditions(value: Any) -> List[CustomCondition]:
    conditions = []
    for item in _list(value):
        if isinstance(item, dict):
            conditions.append(CustomCondition(
                name=_text(item.get("name")),
                notes=_text(item.get("notes")),
            ))
        elif _text(item):
            conditions.append(CustomCondition(name=_text(item)))
    return conditions


def _family_history(raw: Any) -> FamilyHistory:
    data = _dict(raw)
    hereditary = _conditions(data.get("hereditary_diseases"))
    infectious = _conditions(data.get("infectious_diseases"))
    cancer = _conditions(data.get("cancer_history"))

    return FamilyHistory(
        father=_parent(data.get("father")),
        mother=_parent(data.get("mother")),
        hereditary_diseases=len(hereditary) > 0,
        hereditary_details=hereditary,
        infectious_diseases_in_family=len(infectious) > 0,
        infectious_details=infectious,
        cancer_history=len(cancer) > 0,
        cancer_details=cancer,
    )


def _habits(raw: Any) -> Habits:
    habits = Habits()
    data = _dict(raw)
    if not data:
        return habits

    habits.smoking = _flag(data.get("smoking"))
    habits.smoking_details.duration = _text(data.get("smoking_duration"))
    habits.smoking_details.cigarettes_per_day = _number(
        data.get("cigarettes_per_day"), 0, integer=True
    )
    habits.alcohol = _flag(data.get("alcohol"))
    habits.alcohol_details.duration = _text(data.get("alcohol_duration"))
    habits.alcohol_details.quantity_per_day = _text(data.get("alcohol_quantity"))
    habits.toxic_exposure = _flag(data.get("toxic_exposure"))
    habits.toxic_exposure_details.type = _text(data.get("toxic_type"))
    habits.toxic_exposure_details.duration = _text(data.get("toxic_duration"))
    habits.residence_in_epidemic_region = _flag(data.get("residence_in_epidemic_region"))
    habits.epidemic_region_details = _text(data.get("epidemic_region_details"))
    habits.exposure_to_infected_water = _flag(data.get("exposure_to_infected_water"))
    habits.infected_water_details = _text(data.get("infected_water_details"))
    return habits


def _babinski(value: Any) -> str:
    return "positive" if _text(value).lower() == "positive" else "negative"


def _neurological_examination(raw: Any) -> NeurologicalExamination:
    exam = NeurologicalExamination()
    data = _dict(raw)
    if not data:
        return exam

    nerves = exam.cranial_nerves
    nerves.pupil_size.left = _number(data.get("pupil_size_left"), nerves.pupil_size.left)
    nerves.pupil_size.right = _number(data.get("pupil_size_right"), nerves.pupil_size.right)

    light_reflex = _text(data.get("light_reflex"))
    if light_reflex:
        nerves.light_reflex.direct = light_reflex
        nerves.light_reflex.indirect = light_reflex

    strength = exam.motor.strength
    strength.upper_limbs.left = _number(data.get("muscle_strength_left_upper"), 0, integer=True)
    strength.upper_limbs.right = _number(data.get("muscle_strength_right_upper"), 0, integer=True)
    strength.lower_limbs.left = _number(data.get("muscle_strength_left_lower"), 0, integer=True)
    strength.lower_limbs.right = _number(data.get("muscle_strength_right_lower"), 0, integer=True)

    babinski = exam.motor.babinski_sign
    if data.get("babinski_sign"):
        babinski.left = babinski.right = _babinski(data["babinski_sign"])
    if data.get("babinski_sign_left"):
        babinski.left = _babinski(data["babinski_sign_left"])
    if data.get("babinski_sign_right"):
        babinski.right = _babinski(data["babinski_sign_right"])

    return exam


def _treatments(value: Any) -> List[TreatmentItem]:
    return [
        TreatmentItem(
            name=_text(item.get("name")),
            dosage=_text(item.get("dosage")),
            frequency=_text(item.get("frequency")),
            start_date=canonical_date(item.get("start_date")),
            end_date=canonical_date(item.get("end_date")),
            notes=_text(item.get("notes")),
        )
        for item in _list(value)
        if isinstance(item, dict)
    ]


def _allergies(value: Any) -> List[AllergyItem]:
    allergies = []
    for item in _list(value):
        if isinstance(item, dict):
            allergies.append(AllergyItem(
                name=_text(item.get("name")),
                reaction=_text(item.get("reaction")),
            ))
        elif _text(item):
            allergies.append(AllergyItem(name=_text(item)))
    return allergies


def _surgeries(value: Any) -> List[SurgeryItem]:
    return [
        SurgeryItem(
            name=_text(_first(item, "procedure", "name")),
            date=canonical_date(item.get("date")),
            notes=_text(item.get("notes")),
        )
        for item in _list(value)
        if isinstance(item, dict)
    ]


def _drug_use(value: Any) -> List[DrugUseItem]:
    return [
        DrugUseItem(
            name=_text(_first(item, "drug_name", "name")),
            duration=_text(item.get("duration")),
            notes=_text(item.get("notes")),
        )
        for item in _list(value)
        if isinstance(item, dict)
    ]


# ----------------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------------

def normalize(raw: Optional[Dict[str, Any]]) -> PatientRecord:
    """
    Normalize a raw extracted record into a fully scaffolded PatientRecord.

    Args:
        raw: Model JSON object or pattern extractor output (may be None/empty)

    Returns:
        New PatientRecord; never shares state with the input
    """
    raw = canonical_keys(raw)

    return PatientRecord(
        security_id=_text(raw.get("id_number")),
        admission_date=canonical_date(raw.get("admission_date")),
        full_name=_text(raw.get("full_name")),
        gender=_text(raw.get("gender")),
        birth_date=canonical_date(raw.get("date_of_birth")),
        chief_complaint=_text(raw.get("chief_complaint")),
        present_illness=_text(raw.get("present_illness")),
        diagnoses=_names(raw.get("current_diagnosis")),
        current_treatment=_treatments(raw.get("current_treatment")),
        vital_signs=_vital_signs(raw.get("vital_signs")),
        past_medical_history=_past_medical_history(raw.get("past_medical_history")),
        family_history=_family_history(raw.get("family_status")),
        habits=_habits(raw.get("habits")),
        neurological_examination=_neurological_examination(raw.get("neurological_examination")),
        allergies=_allergies(raw.get("allergies")),
        surgical_history=_surgeries(raw.get("surgical_history")),
        drug_use_history=_drug_use(raw.get("drug_use_history")),
    )


def is_valid_lab_row(row: Any) -> bool:
    """A lab row needs a test name, test date and result value."""
    if not isinstance(row, dict):
        return False
    value = row.get("result_value")
    return bool(
        _text(row.get("test_name"))
        and _text(row.get("test_date"))
        and value is not None
        and _text(value) != ""
    )


def _enum_or_default(enum_cls, value: Any, default):
    try:
        return enum_cls(_text(value).lower())
    except ValueError:
        return default


def normalize_lab_row(row: Dict[str, Any], patient_id: str) -> LabResultRecord:
    """
    Normalize one lab test object from the model into a LabResultRecord.

    Status and severity come from the classifier whenever value and range
    are both numeric; otherwise the row's own values are kept when valid,
    and default to normal/normal.
    """
    result_value = row.get("result_value")
    if isinstance(result_value, float) and result_value.is_integer():
        result_value = int(result_value)
    result_value = _text(result_value)
    reference_range = _text(row.get("reference_range"))

    if is_classifiable(result_value, reference_range):
        classification = classify(result_value, reference_range)
        status, severity = classification.status, classification.severity
    else:
        status = _enum_or_default(LabStatus, row.get("status"), LabStatus.NORMAL)
        severity = _enum_or_default(LabSeverity, row.get("severity"), LabSeverity.NORMAL)

    return LabResultRecord(
        patient_id=str(patient_id),
        test_date=canonical_date(row.get("test_date")),
        test_name=_text(row.get("test_name")),
        category=LabCategory.coerce(row.get("category")),
        result_value=result_value,
        result_unit=_text(row.get("result_unit")),
        reference_range=reference_range,
        status=status,
        severity=severity,
    )
