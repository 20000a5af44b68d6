# ============================================================================
# tests/unit/test_configuration.py
# ============================================================================
"""
Tests for pydantic-settings configuration
"""

import pytest
from pydantic import ValidationError

from clinical_intake.config import (
    CompletionSettings,
    ExtractionSettings,
    LoggingSettings,
    StorageSettings,
)


class TestCompletionSettings:
    """Remote completion endpoint settings"""

    def test_defaults(self, monkeypatch):
        """Test default schedule and sampling values"""
        monkeypatch.delenv("COMPLETION_API_KEY", raising=False)
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        settings = CompletionSettings(_env_file=None)

        assert settings.COMPLETION_TEMPERATURE == 0.01
        assert settings.COMPLETION_MAX_TOKENS == 2000
        assert settings.COMPLETION_ATTEMPT_TIMEOUTS == [60.0, 65.0, 70.0]
        assert settings.COMPLETION_RETRY_DELAY == 2.0
        assert settings.COMPLETION_API_URL.startswith("https://openrouter.ai/")
        assert settings.COMPLETION_API_KEY is None

    def test_openrouter_key_alias(self, monkeypatch):
        """Test OPENROUTER_API_KEY is accepted as the key"""
        monkeypatch.delenv("COMPLETION_API_KEY", raising=False)
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")

        settings = CompletionSettings(_env_file=None)
        assert settings.COMPLETION_API_KEY == "sk-test"

    def test_timeouts_from_env(self, monkeypatch):
        monkeypatch.setenv("COMPLETION_ATTEMPT_TIMEOUTS", "[5, 10]")
        settings = CompletionSettings(_env_file=None)
        assert settings.COMPLETION_ATTEMPT_TIMEOUTS == [5.0, 10.0]

    def test_rejects_non_positive_timeouts(self, monkeypatch):
        monkeypatch.setenv("COMPLETION_ATTEMPT_TIMEOUTS", "[5, 0]")
        with pytest.raises(ValidationError):
            CompletionSettings(_env_file=None)

    def test_rejects_empty_schedule(self, monkeypatch):
        monkeypatch.setenv("COMPLETION_ATTEMPT_TIMEOUTS", "[]")
        with pytest.raises(ValidationError):
            CompletionSettings(_env_file=None)


class TestExtractionSettings:

    def test_defaults(self):
        settings = ExtractionSettings(_env_file=None)

        assert settings.DOCUMENT_CHAR_BUDGET == 4000
        assert settings.LAB_CHUNK_SIZE == 2000
        assert settings.LAB_TEMPERATURE == 0.1
        assert settings.LAB_MAX_CONCURRENCY == 1

    def test_concurrency_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("LAB_MAX_CONCURRENCY", "0")
        with pytest.raises(ValidationError):
            ExtractionSettings(_env_file=None)


def test_storage_defaults(monkeypatch):
    """Test the memory backend is the default"""
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    settings = StorageSettings(_env_file=None)

    assert settings.STORAGE_BACKEND == "memory"
    assert settings.PATIENTS_TABLE == "patients"
    assert settings.LABS_TABLE == "labs"


def test_logging_defaults(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = LoggingSettings(_env_file=None)

    assert settings.LOG_LEVEL == "INFO"
    assert settings.LOG_JSON is False
    assert settings.LOG_FILE is None
