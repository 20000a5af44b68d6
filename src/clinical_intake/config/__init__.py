# ============================================================================
# src/clinical_intake/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .completion_config import completion_settings, CompletionSettings
from .extraction_config import extraction_settings, ExtractionSettings
from .storage_config import storage_settings, StorageSettings
from .logging_config import logging_settings, LoggingSettings

__all__ = [
    "completion_settings",
    "CompletionSettings",
    "extraction_settings",
    "ExtractionSettings",
    "storage_settings",
    "StorageSettings",
    "logging_settings",
    "LoggingSettings",
]
