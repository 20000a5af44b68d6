# ============================================================================
# src/clinical_intake/config/extraction_config.py
# ============================================================================
"""
Extraction Pipeline Configuration
- Single-document character budget
- Lab import chunk size / temperature / concurrency
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DOCUMENT_CHAR_BUDGET: int = Field(
        default=4000,
        description="Characters of document text sent to the model"
    )
    LAB_CHUNK_SIZE: int = Field(
        default=2000,
        description="Maximum characters per line-aligned lab import chunk"
    )
    LAB_TEMPERATURE: float = Field(
        default=0.1,
        description="Temperature for lab table extraction"
    )
    LAB_MAX_CONCURRENCY: int = Field(
        default=1,
        ge=1,
        description="Chunks extracted concurrently (1 = sequential)"
    )


extraction_settings = ExtractionSettings()
