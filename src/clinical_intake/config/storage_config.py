# ============================================================================
# src/clinical_intake/config/storage_config.py
# ============================================================================
"""
Persistence Collaborator Configuration
- Backend selection (memory | supabase)
- Hosted database URL and key
- Table names
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    STORAGE_BACKEND: str = Field(
        default="memory",
        description="Persistence backend: memory or supabase"
    )
    SUPABASE_URL: Optional[str] = Field(
        default=None,
        description="Project URL, e.g. https://xyz.supabase.co"
    )
    SUPABASE_KEY: Optional[str] = Field(
        default=None,
        description="Anon or service-role key"
    )
    PATIENTS_TABLE: str = Field(default="patients")
    LABS_TABLE: str = Field(default="labs")
    STORAGE_TIMEOUT: float = Field(
        default=30.0,
        description="Per-request timeout for the hosted database (seconds)"
    )


storage_settings = StorageSettings()
