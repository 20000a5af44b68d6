# ============================================================================
# src/clinical_intake/storage/factory.py
# ============================================================================
"""
Persistence backend factory.
"""

import logging
from typing import Optional

from .base import PatientStore
from .memory_store import MemoryPatientStore
from .supabase_store import SupabasePatientStore
from ..config import storage_settings, StorageSettings

_logger = logging.getLogger(__name__)


def create_store(settings: Optional[StorageSettings] = None) -> PatientStore:
    """
    Build the configured PatientStore.

    Raises:
        ValueError: unknown backend name
        ConfigurationError: supabase backend without URL/key
    """
    settings = settings or storage_settings
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "memory":
        store = MemoryPatientStore()
    elif backend == "supabase":
        store = SupabasePatientStore(
            url=settings.SUPABASE_URL,
            key=settings.SUPABASE_KEY,
            patients_table=settings.PATIENTS_TABLE,
            labs_table=settings.LABS_TABLE,
            timeout=settings.STORAGE_TIMEOUT,
        )
    else:
        raise ValueError(f"Unknown storage backend: {backend}. Supported: memory, supabase")

    _logger.info(f"Using {backend} storage backend")
    return store
