# ============================================================================
# src/clinical_intake/storage/__init__.py
# ============================================================================
"""
Persistence collaborators (injected into the pipeline, never global).
"""

from .base import PatientStore, REQUIRED_PATIENT_FIELDS
from .memory_store import MemoryPatientStore
from .supabase_store import SupabasePatientStore
from .factory import create_store

__all__ = [
    "PatientStore",
    "REQUIRED_PATIENT_FIELDS",
    "MemoryPatientStore",
    "SupabasePatientStore",
    "create_store",
]
