# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from clinical_intake.completion.base import BaseCompletionClient, BackendType
from clinical_intake.storage.memory_store import MemoryPatientStore


class ScriptedCompletionClient(BaseCompletionClient):
    """
    Completion client that replays canned responses in order.

    Each script entry is either response text, an exception to raise, or a
    number of seconds to hang (to trigger attempt timeouts). When the script
    runs out, the last entry repeats.
    """

    def __init__(self, script: List[Any]):
        super().__init__({})
        self.script = list(script)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    @property
    def backend_type(self) -> BackendType:
        return BackendType.OPENROUTER

    @property
    def model_name(self) -> str:
        return "scripted"

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False
    ) -> Dict[str, Any]:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "json_mode": json_mode,
        })
        index = min(len(self.calls) - 1, len(self.script) - 1)
        step = self.script[index]

        if isinstance(step, BaseException):
            raise step
        if isinstance(step, (int, float)):
            await asyncio.sleep(step)
            return {"text": ""}
        self._request_count += 1
        return {"text": step, "model": "scripted", "backend": "openrouter"}

    async def health_check(self) -> Dict[str, Any]:
        return {"healthy": True, "backend": "openrouter", "model": "scripted", "details": "test"}

    async def close(self) -> None:
        self.closed = True


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def scripted_client():
    """Factory for ScriptedCompletionClient."""
    return ScriptedCompletionClient


@pytest.fixture
def fast_sleep():
    """Sleep replacement for retry pauses."""
    return no_sleep


@pytest.fixture
def memory_store():
    return MemoryPatientStore()


@pytest.fixture
def sample_admission_text():
    """Labeled admission note in the shape the pattern extractor understands"""
    return (
        "ADMISSION NOTE\n"
        "Name: Jane Roe\n"
        "Gender: Female\n"
        "Date of Birth: 03/15/1962\n"
        "Chief Complaint: severe headache\n"
        "\n"
        "Vital Signs\n"
        "Temperature: 37.2°C\n"
        "Pulse: 88\n"
        "Respiration: 18\n"
        "Blood Pressure: 150/95\n"
        "\n"
        "Patient has a history of hypertension and history of diabetes.\n"
        "Father: Deceased due to stroke, Mother: Alive\n"
        "Smokes 10 cigarettes per day.\n"
        "Pupils size: 3 mm, normal light reflex\n"
        "Left: Upper limb: 4/5\n"
        "Right: Lower limb: 5/5\n"
        "Left Babinski sign: Positive\n"
        "Allergies: Penicillin - rash, Sulfa: hives\n"
    )


@pytest.fixture
def sample_lab_text():
    """Sample lab report text for testing"""
    return """
    Central Laboratory Report

    Patient: Jane Roe
    Date: 2024-01-15

    COMPLETE BLOOD COUNT (CBC)

    Test                Result      Reference Range    Unit
    ----------------------------------------------------------------
    WBC                 7.2         4.5-11.0           K/uL
    Hemoglobin          11.5        12.0-15.5          g/dL
    Platelets           520         150-400            K/uL
    """


@pytest.fixture
def lab_rows_json():
    """Model answer for one lab chunk"""
    return """[
  {"test_date": "2024-01-15", "test_name": "WBC", "category": "Complete Blood Count",
   "result_value": "7.2", "result_unit": "K/uL", "reference_range": "4.5-11.0",
   "status": "normal", "severity": "normal"},
  {"test_date": "2024-01-15", "test_name": "Hemoglobin", "category": "Complete Blood Count",
   "result_value": 11.5, "result_unit": "g/dL", "reference_range": "12.0-15.5",
   "status": "low", "severity": "warning"}
]"""
