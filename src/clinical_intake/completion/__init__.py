# ============================================================================
# src/clinical_intake/completion/__init__.py
# ============================================================================
"""
Completion module - remote chat-completion clients
"""

from .base import BaseCompletionClient, BackendType
from .openrouter_client import OpenRouterCompletionClient
from .client import create_client

__all__ = [
    "BaseCompletionClient",
    "BackendType",
    "OpenRouterCompletionClient",
    "create_client",
]
