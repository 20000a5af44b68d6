# ============================================================================
# src/clinical_intake/completion/client.py
# ============================================================================
"""
Completion Client Factory

Builds a completion client from settings merged with an explicit config dict.
The caller owns the returned client (and must close it); nothing is cached at
module level.

Usage:
    from clinical_intake.completion.client import create_client

    client = create_client({'api_key': '...'})
    result = await client.generate("Extract ...", system_prompt="...")
    await client.close()
"""

import logging
from typing import Dict, Any, Optional

from .base import BaseCompletionClient
from .openrouter_client import OpenRouterCompletionClient
from ..config import completion_settings, CompletionSettings

DEFAULT_BACKEND = "openrouter"

_logger = logging.getLogger(__name__)


def settings_to_config(settings: CompletionSettings) -> Dict[str, Any]:
    """Flatten pydantic settings into the client config dict."""
    return {
        'backend': DEFAULT_BACKEND,
        'api_url': settings.COMPLETION_API_URL,
        'api_key': settings.COMPLETION_API_KEY,
        'model': settings.COMPLETION_MODEL,
        'max_tokens': settings.COMPLETION_MAX_TOKENS,
        'temperature': settings.COMPLETION_TEMPERATURE,
        'referer': settings.COMPLETION_REFERER,
        'title': settings.COMPLETION_TITLE,
    }


def create_client(
    config: Optional[Dict[str, Any]] = None,
    settings: Optional[CompletionSettings] = None
) -> BaseCompletionClient:
    """
    Factory function to create a completion client.

    Passed config values take precedence over settings values.

    Args:
        config: Overrides, e.g. {'api_key': ..., 'model': ...}
        settings: Settings instance (default: module settings)

    Returns:
        Configured client instance

    Raises:
        ValueError: If backend type is not supported
    """
    base = settings_to_config(settings or completion_settings)
    config = {**base, **{k: v for k, v in (config or {}).items() if v is not None}}
    backend = str(config.get('backend', DEFAULT_BACKEND)).lower()

    if backend in ("openrouter", "openai"):
        client = OpenRouterCompletionClient(config)
    else:
        raise ValueError(
            f"Unknown backend: {backend}. Supported backends: openrouter, openai"
        )

    _logger.debug(f"Created {backend} completion client for {client.model_name}")
    return client
