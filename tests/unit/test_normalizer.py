# ============================================================================
# tests/unit/test_normalizer.py
# ============================================================================
"""
Tests for raw record -> PatientRecord / LabResultRecord normalization
"""

import pytest

from clinical_intake.constants import LabCategory, LabSeverity, LabStatus
from clinical_intake.core.normalizer import is_valid_lab_row, normalize, normalize_lab_row
from clinical_intake.records.patient import PatientRecord


class TestNormalizePatient:
    """normalize(raw) -> PatientRecord"""

    @pytest.mark.parametrize("raw", [None, {}, {"unexpected": 1}])
    def test_empty_input_gives_full_scaffold(self, raw):
        """Test every nested object exists with its defaults"""
        record = normalize(raw)

        assert record == PatientRecord()
        exam = record.neurological_examination
        assert exam.cranial_nerves.cn_xii.tongue_position == "midline"
        assert exam.motor.babinski_sign.left == "negative"
        assert exam.meningeal_signs.neck_stiffness == "negative"
        assert record.vital_signs.weight is None
        assert record.family_history.father.status == "alive"
        assert record.past_medical_history.cardiovascular.others == []

    def test_scalar_fields_and_aliases(self):
        record = normalize({
            "id_number": "A-123",
            "admission_date": "01/21/2025",
            "full_name": "  Jane Roe ",
            "gender": "Female",
            "date_of_birth": "1962/03/15",
            "chief_complaint": "Headache",
            "current_diagnosis": ["Migraine", {"name": "Hypertension"}, ""],
        })

        assert record.security_id == "A-123"
        assert record.admission_date == "2025-01-21"
        assert record.full_name == "Jane Roe"
        assert record.birth_date == "1962-03-15"
        assert record.diagnoses == ["Migraine", "Hypertension"]

    def test_annotated_vital_signs(self):
        record = normalize({
            "vital_signs": {
                "temperature": "98.6°F",
                "pulse": "72 bpm",
                "respiration": "16/min",
                "blood_pressure": "120/80",
                "weight": "70 kg",
                "height": "",
            }
        })
        vitals = record.vital_signs

        assert vitals.temperature == 98.6
        assert vitals.pulse == 72
        assert vitals.respiration == 16
        assert vitals.blood_pressure == "120/80"
        assert vitals.weight == 70.0
        assert vitals.height is None

    def test_unparseable_number_keeps_default(self):
        record = normalize({"vital_signs": {"pulse": "unknown", "temperature": "n/a"}})
        assert record.vital_signs.pulse == 0
        assert record.vital_signs.temperature == 0

    def test_history_flags(self):
        record = normalize({
            "past_medical_history": {
                "hypertension": True,
                "diabetes_type2": "yes",
                "asthma": "no",
                "hepatitis": 1,
                "vaccination_history": [{"vaccine_name": "Influenza", "date": "2024/10/01"}],
            }
        })
        history = record.past_medical_history

        assert history.cardiovascular.hypertension is True
        assert history.endocrine.diabetes_type2 is True
        assert history.respiratory.asthma is False
        assert history.infectious_disease.hepatitis is True
        assert history.kidney.chronic_kidney_disease is False
        assert history.vaccination_history[0].vaccine_name == "Influenza"
        assert history.vaccination_history[0].date == "2024-10-01"
        assert history.vaccination_history[0].notes == ""

    def test_family_history_derived_flags(self):
        record = normalize({
            "family_status": {
                "father": {"status": "deceased", "death_reason": "stroke"},
                "mother": {"status": "Alive"},
                "hereditary_diseases": ["Huntington disease"],
                "infectious_diseases": [],
                "cancer_history": [{"name": "Breast cancer", "notes": "maternal aunt"}],
            }
        })
        family = record.family_history

        assert family.father.status == "deceased"
        assert family.father.cause == "stroke"
        assert family.mother.status == "alive"
        assert family.hereditary_diseases is True
        assert family.hereditary_details[0].name == "Huntington disease"
        assert family.infectious_diseases_in_family is False
        assert family.cancer_history is True
        assert family.cancer_details[0].notes == "maternal aunt"

    def test_neurological_exam(self):
        record = normalize({
            "neurological_exam": {
                "pupil_size_left": "3 mm",
                "pupil_size_right": 2.5,
                "light_reflex": "sluggish",
                "muscle_strength_left_upper": "4/5",
                "muscle_strength_right_lower": 5,
                "babinski_sign": "Positive",
                "babinski_sign_right": "equivocal",
            }
        })
        exam = record.neurological_examination

        assert exam.cranial_nerves.pupil_size.left == 3.0
        assert exam.cranial_nerves.pupil_size.right == 2.5
        assert exam.cranial_nerves.light_reflex.direct == "sluggish"
        assert exam.motor.strength.upper_limbs.left == 4
        assert exam.motor.strength.lower_limbs.right == 5
        assert exam.motor.babinski_sign.left == "positive"
        assert exam.motor.babinski_sign.right == "negative"
        assert exam.cranial_nerves.cn_xii.tongue_position == "midline"

    def test_list_sections(self):
        record = normalize({
            "current_treatment": [{"name": "Aspirin", "dosage": "100 mg"}, "not an object"],
            "allergies": [{"name": "Penicillin", "reaction": "rash"}, "Latex"],
            "surgical_history": [{"procedure": "Appendectomy", "date": "2001/05/02"}],
            "drug_use_history": [{"drug_name": "Cannabis", "duration": "2 years"}],
        })

        assert len(record.current_treatment) == 1
        assert record.current_treatment[0].frequency == ""
        assert [a.name for a in record.allergies] == ["Penicillin", "Latex"]
        assert record.allergies[1].reaction == ""
        assert record.surgical_history[0].name == "Appendectomy"
        assert record.surgical_history[0].date == "2001-05-02"
        assert record.drug_use_history[0].name == "Cannabis"

    def test_habits(self):
        record = normalize({
            "habits": {
                "smoking": True,
                "cigarettes_per_day": "10 cigarettes",
                "smoking_duration": "20 years",
                "alcohol": "false",
            }
        })

        assert record.habits.smoking is True
        assert record.habits.smoking_details.cigarettes_per_day == 10
        assert record.habits.smoking_details.duration == "20 years"
        assert record.habits.alcohol is False

    def test_deterministic_and_detached(self):
        raw = {"full_name": "Jane Roe", "allergies": [{"name": "Latex"}]}
        first = normalize(raw)
        second = normalize(raw)

        assert first == second
        first.allergies.append(first.allergies[0])
        assert len(second.allergies) == 1
        assert raw["allergies"] == [{"name": "Latex"}]

    def test_populated_fields(self):
        record = normalize({"full_name": "Jane Roe", "chief_complaint": "Headache"})
        assert record.populated_fields() == ["full_name", "chief_complaint"]


class TestLabRows:
    """Lab row validation and normalization"""

    def test_valid_row(self):
        assert is_valid_lab_row({"test_name": "WBC", "test_date": "2024-01-15", "result_value": 0})

    @pytest.mark.parametrize("row", [
        {"test_date": "2024-01-15", "result_value": "7.2"},
        {"test_name": "WBC", "result_value": "7.2"},
        {"test_name": "WBC", "test_date": "2024-01-15"},
        {"test_name": "WBC", "test_date": "2024-01-15", "result_value": ""},
        "WBC 7.2",
    ])
    def test_invalid_rows(self, row):
        assert not is_valid_lab_row(row)

    def test_defaults_for_missing_fields(self):
        record = normalize_lab_row(
            {"test_name": "Culture", "test_date": "2024-01-15", "result_value": "No growth"},
            "p-1",
        )

        assert record.patient_id == "p-1"
        assert record.category == LabCategory.OTHER
        assert record.status == LabStatus.NORMAL
        assert record.severity == LabSeverity.NORMAL
        assert record.result_unit == ""

    def test_numeric_rows_are_classified(self):
        """Test the classifier overrides the model's own verdict"""
        record = normalize_lab_row({
            "test_name": "Platelets",
            "test_date": "01/15/2024",
            "category": "complete blood count",
            "result_value": 520,
            "reference_range": "150-400",
            "status": "normal",
            "severity": "normal",
        }, "p-1")

        assert record.result_value == "520"
        assert record.test_date == "2024-01-15"
        assert record.category == LabCategory.COMPLETE_BLOOD_COUNT
        assert record.status == LabStatus.HIGH
        assert record.severity == LabSeverity.WARNING

    def test_qualitative_rows_keep_model_status(self):
        record = normalize_lab_row({
            "test_name": "HBsAg",
            "test_date": "2024-01-15",
            "category": "Infection Markers",
            "result_value": "Positive",
            "reference_range": "Negative",
            "status": "CRITICAL",
            "severity": "bogus",
        }, "p-1")

        assert record.status == LabStatus.CRITICAL
        assert record.severity == LabSeverity.NORMAL

    def test_whole_float_value_is_not_decimal(self):
        record = normalize_lab_row(
            {"test_name": "Na", "test_date": "2024-01-15", "result_value": 140.0}, "p-1"
        )
        assert record.result_value == "140"
