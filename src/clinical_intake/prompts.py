# ============================================================================
# src/clinical_intake/prompts.py
# ============================================================================
"""
Prompt templates for the remote completion calls.

Two templates:
- PATIENT_*: one clinical document -> one JSON object (patient schema)
- LAB_*: one chunk of a lab report -> JSON array of lab tests

Templates use str.format; literal braces are doubled.
"""

from .constants.lab import LAB_CATEGORY_NAMES


PATIENT_SYSTEM_PROMPT = (
    "You are a medical data extraction assistant. Extract patient information "
    "from medical documents and return it as a valid JSON object."
)

PATIENT_EXTRACTION_PROMPT = """You are a medical data extraction assistant. First, translate the provided medical document to professional medical English, maintaining all medical terminology and clinical details. Then, extract the following patient information accurately from the translated text and return it as a valid JSON object.
IMPORTANT: Your response must be a valid JSON object only, with no additional text or explanation before or after the JSON.

Translation Guidelines:
1. Maintain all medical terminology and clinical terms in their proper English form
2. Preserve numerical values, measurements, and units exactly as written
3. Keep dates in their original format for extraction
4. Maintain the professional medical tone and clinical accuracy
5. Expand medical abbreviations to their full English forms

Required fields:
- id_number: The patient's security/ID number (ID, Security ID, Patient ID, MRN, Medical Record Number)
- admission_date: The date of admission (YYYY-MM-DD)
- full_name: The patient's complete name
- date_of_birth: The patient's birthdate (YYYY-MM-DD)
- gender: The patient's gender (Male or Female)
- chief_complaint: The main reason for the patient's visit
- present_illness: A summary of the current illness history
- current_diagnosis: Array of current diagnoses
- current_treatment: Array of current medications:
  {{"name": "...", "dosage": "500mg", "frequency": "twice daily", "start_date": "YYYY-MM-DD", "end_date": "YYYY-MM-DD", "notes": "..."}}
- vital_signs: {{"temperature": ..., "pulse": ..., "respiration": ..., "blood_pressure": "120/80", "weight": ..., "height": ...}}
- past_medical_history: Object with true/false for hypertension, coronary_artery_disease,
  atrial_fibrillation, heart_failure, cerebral_infarction, diabetes_type1, diabetes_type2,
  hyperthyroidism, hypothyroidism, asthma, copd, acute_kidney_injury, chronic_kidney_disease,
  fatty_liver, cirrhosis, hepatitis, tuberculosis, plus
  vaccination_history: [{{"vaccine_name": "...", "date": "YYYY-MM-DD", "notes": "..."}}]
- allergies: [{{"name": "Allergen name", "reaction": "Reaction description"}}]
- surgical_history: [{{"procedure": "Surgery name", "date": "YYYY-MM-DD", "notes": "..."}}]
- drug_use_history: [{{"drug_name": "Drug name", "duration": "Duration of use", "notes": "..."}}]
- habits: {{"smoking": true/false, "cigarettes_per_day": number, "smoking_duration": "...",
  "alcohol": true/false, "alcohol_quantity": "...", "alcohol_duration": "...",
  "toxic_exposure": true/false, "toxic_type": "...", "toxic_duration": "...",
  "residence_in_epidemic_region": true/false, "epidemic_region_details": "...",
  "exposure_to_infected_water": true/false, "infected_water_details": "..."}}
- neurological_examination: {{"pupil_size_left": number, "pupil_size_right": number,
  "light_reflex": "...", "muscle_strength_left_upper": number, "muscle_strength_right_upper": number,
  "muscle_strength_left_lower": number, "muscle_strength_right_lower": number, "babinski_sign": "..."}}
- family_status: {{"father": {{"status": "alive" or "deceased", "death_reason": "..."}},
  "mother": {{"status": "alive" or "deceased", "death_reason": "..."}},
  "hereditary_diseases": [...], "infectious_diseases": [...], "cancer_history": [...]}}

IMPORTANT:
1. First translate the entire document to professional medical English
2. Extract each medication separately with its complete details
3. For dosage, include both the amount and unit (e.g., "500mg", "10ml")
4. For medical conditions, set the value to true ONLY if explicitly mentioned as present
5. For allergies, surgical history, and drug use, extract ALL mentioned items
6. If a field is not mentioned in the document, leave it as an empty string or false for booleans

Medical document:
{document}"""


LAB_SYSTEM_PROMPT = """You are a medical lab results extraction assistant. Your task is to extract lab test data from the provided text, translate test names to English, and return it as a valid JSON array.
IMPORTANT: Your response must be a valid JSON array only, with no additional text or explanation before or after the JSON.
Each test in the array should be an object with these exact fields:
{{
  "test_name": "string (in English, use medical abbreviations if possible)",
  "test_date": "YYYY-MM-DD",
  "result_value": "string or number",
  "result_unit": "string",
  "reference_range": "string",
  "status": "normal" | "high" | "low" | "critical",
  "severity": "normal" | "warning" | "critical",
  "category": {categories}
}}

DO NOT include any explanation or text before or after the JSON array."""

LAB_EXTRACTION_PROMPT = """Extract lab test data from this text and return it as a JSON array. Follow these rules:
1. Translate the text to English (test_name must be in English, use medical abbreviations if possible)
2. Return ONLY the JSON array, no other text or explanation
3. Each test must have all required fields
4. For dates, use YYYY-MM-DD format
5. For status, compare result with reference range:
   - within range: "normal"
   - above range: "high"
   - below range: "low"
   - significantly outside range: "critical"
6. For severity:
   - status "normal": "normal"
   - status "high" or "low": "warning"
   - status "critical": "critical"
7. Categorize each test into the appropriate category

Text to process:
{chunk}"""


def build_patient_prompt(document: str) -> str:
    return PATIENT_EXTRACTION_PROMPT.format(document=document)


def build_lab_system_prompt() -> str:
    categories = " | ".join(f'"{name}"' for name in LAB_CATEGORY_NAMES)
    return LAB_SYSTEM_PROMPT.format(categories=categories)


def build_lab_prompt(chunk: str) -> str:
    return LAB_EXTRACTION_PROMPT.format(chunk=chunk)
