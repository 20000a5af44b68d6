# ============================================================================
# src/clinical_intake/records/patient.py
# ============================================================================
"""
Patient record shape produced by the normalizer.

Every nested object is built by its dataclass default factory, so a freshly
constructed PatientRecord is fully scaffolded: all booleans False, all strings
empty, all scores 0, all lists empty. Consumers can walk
record.neurological_examination.cranial_nerves.cn_xii.tongue_position
without checking for missing levels.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


# ----------------------------------------------------------------------------
# List items
# ----------------------------------------------------------------------------

@dataclass
class CustomCondition:
    name: str = ""
    notes: str = ""


@dataclass
class TreatmentItem:
    name: str = ""
    dosage: str = ""
    frequency: str = ""
    start_date: str = ""
    end_date: str = ""
    notes: str = ""


@dataclass
class VaccinationItem:
    vaccine_name: str = ""
    date: str = ""
    notes: str = ""


@dataclass
class AllergyItem:
    name: str = ""
    reaction: str = ""


@dataclass
class SurgeryItem:
    name: str = ""
    date: str = ""
    notes: str = ""


@dataclass
class DrugUseItem:
    name: str = ""
    duration: str = ""
    notes: str = ""


# ----------------------------------------------------------------------------
# Vital signs
# ----------------------------------------------------------------------------

@dataclass
class VitalSigns:
    pulse: int = 0
    respiration: int = 0
    blood_pressure: str = ""
    temperature: float = 0
    weight: Optional[float] = None
    height: Optional[float] = None


# ----------------------------------------------------------------------------
# Past medical history
# ----------------------------------------------------------------------------

@dataclass
class CardiovascularHistory:
    hypertension: bool = False
    coronary_artery_disease: bool = False
    atrial_fibrillation: bool = False
    heart_failure: bool = False
    cerebral_infarction: bool = False
    others: List[CustomCondition] = field(default_factory=list)


@dataclass
class EndocrineHistory:
    diabetes_type1: bool = False
    diabetes_type2: bool = False
    hyperthyroidism: bool = False
    hypothyroidism: bool = False
    others: List[CustomCondition] = field(default_factory=list)


@dataclass
class RespiratoryHistory:
    asthma: bool = False
    copd: bool = False
    others: List[CustomCondition] = field(default_factory=list)


@dataclass
class KidneyHistory:
    acute_kidney_injury: bool = False
    chronic_kidney_disease: bool = False
    others: List[CustomCondition] = field(default_factory=list)


@dataclass
class LiverHistory:
    fatty_liver: bool = False
    cirrhosis: bool = False
    others: List[CustomCondition] = field(default_factory=list)


@dataclass
class InfectiousHistory:
    hepatitis: bool = False
    tuberculosis: bool = False
    others: List[CustomCondition] = field(default_factory=list)


@dataclass
class PastMedicalHistory:
    cardiovascular: CardiovascularHistory = field(default_factory=CardiovascularHistory)
    endocrine: EndocrineHistory = field(default_factory=EndocrineHistory)
    respiratory: RespiratoryHistory = field(default_factory=RespiratoryHistory)
    kidney: KidneyHistory = field(default_factory=KidneyHistory)
    liver: LiverHistory = field(default_factory=LiverHistory)
    infectious_disease: InfectiousHistory = field(default_factory=InfectiousHistory)
    vaccination_history: List[VaccinationItem] = field(default_factory=list)


# Flat raw key -> (category attribute, flag attribute)
HISTORY_FLAGS: Dict[str, tuple] = {
    "hypertension": ("cardiovascular", "hypertension"),
    "coronary_artery_disease": ("cardiovascular", "coronary_artery_disease"),
    "atrial_fibrillation": ("cardiovascular", "atrial_fibrillation"),
    "heart_failure": ("cardiovascular", "heart_failure"),
    "cerebral_infarction": ("cardiovascular", "cerebral_infarction"),
    "diabetes_type1": ("endocrine", "diabetes_type1"),
    "diabetes_type2": ("endocrine", "diabetes_type2"),
    "hyperthyroidism": ("endocrine", "hyperthyroidism"),
    "hypothyroidism": ("endocrine", "hypothyroidism"),
    "asthma": ("respiratory", "asthma"),
    "copd": ("respiratory", "copd"),
    "acute_kidney_injury": ("kidney", "acute_kidney_injury"),
    "chronic_kidney_disease": ("kidney", "chronic_kidney_disease"),
    "fatty_liver": ("liver", "fatty_liver"),
    "cirrhosis": ("liver", "cirrhosis"),
    "hepatitis": ("infectious_disease", "hepatitis"),
    "tuberculosis": ("infectious_disease", "tuberculosis"),
}


# ----------------------------------------------------------------------------
# Family history / habits
# ----------------------------------------------------------------------------

@dataclass
class ParentStatus:
    status: str = "alive"  # "alive" | "deceased"
    cause: str = ""


@dataclass
class FamilyHistory:
    father: ParentStatus = field(default_factory=ParentStatus)
    mother: ParentStatus = field(default_factory=ParentStatus)
    hereditary_diseases: bool = False
    hereditary_details: List[CustomCondition] = field(default_factory=list)
    infectious_diseases_in_family: bool = False
    infectious_details: List[CustomCondition] = field(default_factory=list)
    cancer_history: bool = False
    cancer_details: List[CustomCondition] = field(default_factory=list)


@dataclass
class SmokingDetails:
    duration: str = ""
    cigarettes_per_day: int = 0


@dataclass
class AlcoholDetails:
    duration: str = ""
    quantity_per_day: str = ""


@dataclass
class ToxicExposureDetails:
    type: str = ""
    duration: str = ""


@dataclass
class Habits:
    smoking: bool = False
    smoking_details: SmokingDetails = field(default_factory=SmokingDetails)
    alcohol: bool = False
    alcohol_details: AlcoholDetails = field(default_factory=AlcoholDetails)
    toxic_exposure: bool = False
    toxic_exposure_details: ToxicExposureDetails = field(default_factory=ToxicExposureDetails)
    residence_in_epidemic_region: bool = False
    epidemic_region_details: str = ""
    exposure_to_infected_water: bool = False
    infected_water_details: str = ""


# ----------------------------------------------------------------------------
# Neurological examination
# ----------------------------------------------------------------------------

@dataclass
class MeningealSigns:
    neck_stiffness: str = "negative"
    kernig_sign: str = "negative"
    brudzinski_sign: str = "negative"


@dataclass
class PupilSize:
    left: float = 0
    right: float = 0


@dataclass
class LightReflex:
    direct: str = ""
    indirect: str = ""


@dataclass
class CranialNerveI:
    status: str = "normal"
    right_status: str = "normal"
    notes: str = ""


@dataclass
class CranialNerveII:
    visual_acuity_left: str = "normal"
    visual_acuity_right: str = "normal"
    visual_fields_left: str = "normal"
    visual_fields_right: str = "normal"
    fundus_left: str = "normal"
    fundus_right: str = "normal"
    notes: str = ""


@dataclass
class CranialNervesIIIIVVI:
    eye_movement: str = "normal"
    ptosis: bool = False
    nystagmus: bool = False
    diplopia: bool = False
    status: str = "normal"
    notes: str = ""


@dataclass
class CranialNerveV:
    sensation_v1: str = "normal"
    sensation_v2: str = "normal"
    sensation_v3: str = "normal"
    corneal_left: str = "normal"
    corneal_right: str = "normal"
    jaw_strength: str = "normal"
    status: str = "normal"
    notes: str = ""


@dataclass
class CranialNerveVII:
    eye_fissure_left: float = 0
    eye_fissure_right: float = 0
    nasolabial_left: str = "normal"
    nasolabial_right: str = "normal"
    mouth_deviation: str = "none"
    facial_movement: str = "normal"
    status: str = "normal"
    notes: str = ""


@dataclass
class CranialNerveVIII:
    hearing_left: str = "normal"
    hearing_right: str = "normal"
    rinne_test: str = "normal"
    weber_test: str = "normal"
    status: str = "normal"
    notes: str = ""


@dataclass
class CranialNervesIXX:
    palate_elevation: str = "normal"
    gag_reflex: str = "normal"
    speech: str = "normal"
    swallowing: str = "normal"
    status: str = "normal"
    notes: str = ""


@dataclass
class CranialNerveXI:
    scm_strength_left: str = "normal"
    scm_strength_right: str = "normal"
    trapezius_strength_left: str = "normal"
    trapezius_strength_right: str = "normal"
    status: str = "normal"
    notes: str = ""


@dataclass
class CranialNerveXII:
    tongue_position: str = "midline"
    tongue_strength: str = "normal"
    tongue_atrophy: bool = False
    tongue_fasciculations: bool = False
    status: str = "normal"
    notes: str = ""


@dataclass
class CranialNerves:
    pupil_size: PupilSize = field(default_factory=PupilSize)
    light_reflex: LightReflex = field(default_factory=LightReflex)
    cn_i: CranialNerveI = field(default_factory=CranialNerveI)
    cn_ii: CranialNerveII = field(default_factory=CranialNerveII)
    cn_iii_iv_vi: CranialNervesIIIIVVI = field(default_factory=CranialNervesIIIIVVI)
    cn_v: CranialNerveV = field(default_factory=CranialNerveV)
    cn_vii: CranialNerveVII = field(default_factory=CranialNerveVII)
    cn_viii: CranialNerveVIII = field(default_factory=CranialNerveVIII)
    cn_ix_x: CranialNervesIXX = field(default_factory=CranialNervesIXX)
    cn_xi: CranialNerveXI = field(default_factory=CranialNerveXI)
    cn_xii: CranialNerveXII = field(default_factory=CranialNerveXII)


@dataclass
class LimbPair:
    left: int = 0
    right: int = 0


@dataclass
class MotorStrength:
    upper_limbs: LimbPair = field(default_factory=LimbPair)
    lower_limbs: LimbPair = field(default_factory=LimbPair)


@dataclass
class BabinskiSign:
    left: str = "negative"
    right: str = "negative"


@dataclass
class Motor:
    tone: str = ""
    strength: MotorStrength = field(default_factory=MotorStrength)
    babinski_sign: BabinskiSign = field(default_factory=BabinskiSign)


@dataclass
class NeurologicalExamination:
    meningeal_signs: MeningealSigns = field(default_factory=MeningealSigns)
    cranial_nerves: CranialNerves = field(default_factory=CranialNerves)
    motor: Motor = field(default_factory=Motor)
    reflexes: str = ""
    coordination: str = ""
    sensory: str = ""
    autonomic_signs: str = ""


# ----------------------------------------------------------------------------
# Patient
# ----------------------------------------------------------------------------

@dataclass
class PatientRecord:
    security_id: str = ""
    admission_date: str = ""
    full_name: str = ""
    gender: str = ""
    birth_date: str = ""
    chief_complaint: str = ""
    present_illness: str = ""
    diagnoses: List[str] = field(default_factory=list)
    current_treatment: List[TreatmentItem] = field(default_factory=list)
    vital_signs: VitalSigns = field(default_factory=VitalSigns)
    past_medical_history: PastMedicalHistory = field(default_factory=PastMedicalHistory)
    family_history: FamilyHistory = field(default_factory=FamilyHistory)
    habits: Habits = field(default_factory=Habits)
    neurological_examination: NeurologicalExamination = field(default_factory=NeurologicalExamination)
    allergies: List[AllergyItem] = field(default_factory=list)
    surgical_history: List[SurgeryItem] = field(default_factory=list)
    drug_use_history: List[DrugUseItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dict, the shape the persistence layer stores."""
        return asdict(self)

    def populated_fields(self) -> List[str]:
        """Top-level fields that differ from a blank record."""
        blank = PatientRecord()
        return [
            name for name in self.__dataclass_fields__
            if getattr(self, name) != getattr(blank, name)
        ]
