# ============================================================================
# src/clinical_intake/extractors/pattern_extractor.py
# ============================================================================
"""
Pattern-Matching Extractor (deterministic fallback)

Runs a fixed, ordered set of case-insensitive regexes over labeled fields
("Name:", "Chief Complaint:", "Blood Pressure:", ...) and clinical phrases
("history of hypertension", "Father: deceased due to ...").

Output uses the same raw schema the completion model is asked to emit, so
both paths flow through the same normalizer. Each pattern either sets a
scalar or flips a boolean; a miss leaves the scaffolded default. extract()
never raises.
"""

import re
import logging
from typing import Any, Dict, List, Pattern, Tuple

from ..core.parsing import canonical_date, parse_float
from ..utils.logging import log_performance

logger = logging.getLogger(__name__)

FLAGS = re.IGNORECASE


def _rx(pattern: str) -> Pattern:
    return re.compile(pattern, FLAGS)


# Labeled scalar fields: (raw key, pattern). First group is the value.
LABELED_FIELDS: List[Tuple[str, Pattern]] = [
    ("full_name", _rx(r'Name:\s*([^\n]+)')),
    ("gender", _rx(r'Gender:\s*([^\n]+)')),
    ("date_of_birth", _rx(r'(?:Date of Birth|DOB|Birth Date):\s*([^\n]+)')),
    ("chief_complaint", _rx(r'Chief\s+Complaint:\s*([^\n]+)')),
    ("present_illness", _rx(r'Present\s+Illness\s+History:[\s\n]+([^#]+?)(?=\n\n|\n[A-Z]|$)')),
]

VITAL_PATTERNS: List[Tuple[str, Pattern]] = [
    ("temperature", _rx(r'Temperature:\s*([0-9.]+)\s*[°℃℉CF]+')),
    ("pulse", _rx(r'(?:Pulse|Heart Rate):\s*([0-9]+)')),
    ("respiration", _rx(r'Respiration:\s*([0-9]+)')),
    ("blood_pressure", _rx(r'Blood Pressure:\s*([0-9]+/[0-9]+)')),
]

# Disease-history phrases -> past_medical_history flag
HISTORY_PATTERNS: List[Tuple[str, Pattern]] = [
    ("hypertension", _rx(r'history of hypertension')),
    ("coronary_artery_disease", _rx(r'(?:history of|has) (?:heart disease|coronary disease)')),
    ("heart_failure", _rx(r'(?:history of|has) heart failure')),
    ("atrial_fibrillation", _rx(r'(?:history of|has) (?:atrial fibrillation|afib)')),
    ("diabetes_type1", _rx(r'(?:history of|has) (?:diabetes type 1|type 1 diabetes)')),
    ("diabetes_type2", _rx(r'(?:history of|has) (?:diabetes type 2|type 2 diabetes)')),
    ("hyperthyroidism", _rx(r'(?:history of|has) hyperthyroidism')),
    ("hypothyroidism", _rx(r'(?:history of|has) hypothyroidism')),
    ("asthma", _rx(r'(?:history of|has) asthma')),
    ("copd", _rx(r'(?:history of|has) (?:COPD|chronic obstructive)')),
    ("fatty_liver", _rx(r'(?:history of|has) fatty liver')),
    ("cirrhosis", _rx(r'(?:history of|has) cirrhosis')),
    ("acute_kidney_injury", _rx(r'(?:history of|has) acute kidney')),
    ("chronic_kidney_disease", _rx(r'(?:history of|has) chronic kidney')),
    ("hepatitis", _rx(r'history of hepatitis')),
    ("tuberculosis", _rx(r'history of tuberculosis')),
]

# Unspecified diabetes is recorded as type 2
UNTYPED_DIABETES = _rx(r'history of diabetes')

SMOKING = _rx(r'smok(?:es|ing)')
SMOKING_AMOUNT = _rx(r'smok(?:es|ing)\s*([0-9]+)\s*(?:cigarettes|packs)')
SMOKING_DURATION = _rx(r'smok(?:es|ing)\s*(?:for|since)\s*([0-9]+\s*(?:years|months|year|month))')

ALCOHOL = _rx(r'(?:alcohol|drink)')
ALCOHOL_QUANTITY = _rx(r'(?:drinks|consumes)\s*([^,.]+?)(?:per|a|each)\s*day')
ALCOHOL_DURATION = _rx(r'(?:alcohol|drinking)\s*(?:for|since)\s*([0-9]+\s*(?:years|months|year|month))')

PUPIL_BOTH = _rx(r'Pupils?\s*(?:size)?:\s*([0-9.]+)\s*mm')
PUPIL_LEFT = _rx(r'(?:Left|L)\s*pupil\s*(?:size)?:\s*([0-9.]+)\s*mm')
PUPIL_RIGHT = _rx(r'(?:Right|R)\s*pupil\s*(?:size)?:\s*([0-9.]+)\s*mm')

LIGHT_REFLEX_NORMAL = _rx(r'normal light reflex')
LIGHT_REFLEX_ABNORMAL = _rx(r'abnormal light reflex')

# (raw key, pattern) for limb strength such as "Left: Upper limb: 4/5"
STRENGTH_PATTERNS: List[Tuple[str, Pattern]] = [
    ("muscle_strength_left_upper", _rx(r'Left:\s*Upper(?:\s*limb)?:\s*([0-9])/[0-9]')),
    ("muscle_strength_left_lower", _rx(r'Left:\s*Lower(?:\s*limb)?:\s*([0-9])/[0-9]')),
    ("muscle_strength_right_upper", _rx(r'Right:\s*Upper(?:\s*limb)?:\s*([0-9])/[0-9]')),
    ("muscle_strength_right_lower", _rx(r'Right:\s*Lower(?:\s*limb)?:\s*([0-9])/[0-9]')),
]

BABINSKI = _rx(r"Babinski(?:'s)?\s*sign:\s*(Positive|Negative)")
BABINSKI_LEFT = _rx(r"(?:Left|L)\s*Babinski(?:'s)?\s*sign:\s*(Positive|Negative)")
BABINSKI_RIGHT = _rx(r"(?:Right|R)\s*Babinski(?:'s)?\s*sign:\s*(Positive|Negative)")

ALLERGIES = _rx(r'Allergies:\s*([^\n]+)')
NO_ALLERGIES = _rx(r'none|no known|nka')


def _parent_status(text: str, label: str) -> Dict[str, str]:
    status = {"status": "alive", "death_reason": ""}
    if re.search(rf'{label}:\s*(?:Alive|Living)', text, FLAGS):
        return status
    if re.search(rf'{label}:\s*(?:Deceased|Dead)', text, FLAGS):
        status["status"] = "deceased"
        cause = re.search(rf'{label}:.*deceased.*due to\s*([^,.]+)', text, FLAGS)
        if cause:
            status["death_reason"] = cause.group(1).strip()
    return status


def _split_allergies(allergies_text: str) -> List[Dict[str, str]]:
    items = []
    for item in re.split(r',\s*', allergies_text):
        parts = re.split(r'\s*-\s*|\s*:\s*', item)
        if len(parts) > 1:
            items.append({"name": parts[0].strip(), "reaction": " ".join(parts[1:]).strip()})
        else:
            items.append({"name": item.strip(), "reaction": ""})
    return items


class PatternExtractor:
    """
    Deterministic best-effort extraction from labeled clinical text.

    Usage:
        raw = PatternExtractor().extract(text)
        record = normalize(raw)
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    @log_performance(logger, "pattern extraction")
    def extract(self, text: str) -> Dict[str, Any]:
        """
        Extract a raw record from text.

        Args:
            text: Full document text (not truncated)

        Returns:
            Raw record dict in the completion schema
        """
        text = text or ""
        raw: Dict[str, Any] = {}

        self._extract_labeled(text, raw)
        raw["vital_signs"] = self._extract_vitals(text)
        raw["past_medical_history"] = self._extract_history(text)
        raw["family_status"] = {
            "father": _parent_status(text, "Father"),
            "mother": _parent_status(text, "Mother"),
            "hereditary_diseases": [],
            "infectious_diseases": [],
            "cancer_history": [],
        }
        raw["habits"] = self._extract_habits(text)
        raw["neurological_examination"] = self._extract_neuro(text)
        raw["allergies"] = self._extract_allergies(text)
        raw["surgical_history"] = []
        raw["drug_use_history"] = []

        self.logger.debug(
            f"Pattern extraction matched {sum(1 for k in ('full_name', 'gender', 'chief_complaint') if raw.get(k))} "
            f"of 3 key labels"
        )
        return raw

    def _extract_labeled(self, text: str, raw: Dict[str, Any]) -> None:
        for key, pattern in LABELED_FIELDS:
            match = pattern.search(text)
            if match:
                raw[key] = match.group(1).strip()

        if "gender" not in raw:
            if re.search(r'\bmale\b', text, FLAGS):
                raw["gender"] = "Male"
            elif re.search(r'\bfemale\b', text, FLAGS):
                raw["gender"] = "Female"

        if "date_of_birth" in raw:
            raw["date_of_birth"] = canonical_date(raw["date_of_birth"])

    def _extract_vitals(self, text: str) -> Dict[str, Any]:
        vitals: Dict[str, Any] = {
            "temperature": 0,
            "pulse": 0,
            "respiration": 0,
            "blood_pressure": "",
            "weight": None,
            "height": None,
        }
        for key, pattern in VITAL_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            value = match.group(1).strip()
            if key == "temperature":
                parsed = parse_float(value)
                vitals[key] = parsed if parsed is not None else 0
            elif key == "blood_pressure":
                vitals[key] = value
            else:
                vitals[key] = int(value)
        return vitals

    def _extract_history(self, text: str) -> Dict[str, Any]:
        history: Dict[str, Any] = {"cerebral_infarction": False}
        for key, pattern in HISTORY_PATTERNS:
            history[key] = bool(pattern.search(text))

        if not history["diabetes_type1"] and not history["diabetes_type2"]:
            history["diabetes_type2"] = bool(UNTYPED_DIABETES.search(text))

        history["vaccination_history"] = []
        return history

    def _extract_habits(self, text: str) -> Dict[str, Any]:
        habits: Dict[str, Any] = {
            "smoking": False,
            "cigarettes_per_day": 0,
            "smoking_duration": "",
            "alcohol": False,
            "alcohol_quantity": "",
            "alcohol_duration": "",
            "toxic_exposure": False,
            "toxic_type": "",
            "toxic_duration": "",
            "residence_in_epidemic_region": False,
            "epidemic_region_details": "",
            "exposure_to_infected_water": False,
            "infected_water_details": "",
        }

        if SMOKING.search(text):
            habits["smoking"] = True
            amount = SMOKING_AMOUNT.search(text)
            if amount:
                habits["cigarettes_per_day"] = int(amount.group(1))
            duration = SMOKING_DURATION.search(text)
            if duration:
                habits["smoking_duration"] = duration.group(1).strip()

        if ALCOHOL.search(text):
            habits["alcohol"] = True
            quantity = ALCOHOL_QUANTITY.search(text)
            if quantity:
                habits["alcohol_quantity"] = quantity.group(1).strip()
            duration = ALCOHOL_DURATION.search(text)
            if duration:
                habits["alcohol_duration"] = duration.group(1).strip()

        return habits

    def _extract_neuro(self, text: str) -> Dict[str, Any]:
        neuro: Dict[str, Any] = {
            "pupil_size_left": 0,
            "pupil_size_right": 0,
            "light_reflex": "",
            "muscle_strength_left_upper": 0,
            "muscle_strength_right_upper": 0,
            "muscle_strength_left_lower": 0,
            "muscle_strength_right_lower": 0,
            "babinski_sign": "negative",
            "babinski_sign_left": "negative",
            "babinski_sign_right": "negative",
        }

        both = PUPIL_BOTH.search(text)
        if both:
            size = parse_float(both.group(1))
            if size is not None:
                neuro["pupil_size_left"] = size
                neuro["pupil_size_right"] = size

        for key, pattern in (("pupil_size_left", PUPIL_LEFT), ("pupil_size_right", PUPIL_RIGHT)):
            match = pattern.search(text)
            if match:
                size = parse_float(match.group(1))
                if size is not None:
                    neuro[key] = size

        if LIGHT_REFLEX_ABNORMAL.search(text):
            neuro["light_reflex"] = "abnormal"
        elif LIGHT_REFLEX_NORMAL.search(text):
            neuro["light_reflex"] = "normal"

        for key, pattern in STRENGTH_PATTERNS:
            match = pattern.search(text)
            if match:
                neuro[key] = int(match.group(1))

        match = BABINSKI.search(text)
        if match:
            sign = match.group(1).lower()
            neuro["babinski_sign"] = sign
            neuro["babinski_sign_left"] = sign
            neuro["babinski_sign_right"] = sign

        for key, pattern in (("babinski_sign_left", BABINSKI_LEFT), ("babinski_sign_right", BABINSKI_RIGHT)):
            match = pattern.search(text)
            if match:
                neuro[key] = match.group(1).lower()

        return neuro

    def _extract_allergies(self, text: str) -> List[Dict[str, str]]:
        match = ALLERGIES.search(text)
        if not match:
            return []
        allergies_text = match.group(1).strip()
        if NO_ALLERGIES.search(allergies_text):
            return []
        return _split_allergies(allergies_text)


def extract_patterns(text: str) -> Dict[str, Any]:
    """Module-level convenience wrapper."""
    return PatternExtractor().extract(text)
