# ============================================================================
# src/clinical_intake/completion/base.py
# ============================================================================
"""
Base Completion Client Interface

Defines the abstract interface that all chat-completion backends implement.
The extraction pipeline depends only on this contract:

    POST {model, messages: [{role, content}], temperature, max_tokens}
    -> choices[0].message.content

Supported backends:
- openrouter: OpenRouter (or any OpenAI-compatible endpoint) over HTTPS
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from enum import Enum
import logging


class BackendType(Enum):
    """Supported completion backends."""
    OPENROUTER = "openrouter"    # OpenAI-compatible HTTPS endpoint


class BaseCompletionClient(ABC):
    """
    Abstract base class for completion clients.

    All backends must implement:
    - generate(): Async chat completion
    - health_check(): Verify backend is configured / reachable
    - close(): Release network resources
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

        self._request_count = 0
        self._failure_count = 0
        self._total_request_time = 0.0

    @property
    @abstractmethod
    def backend_type(self) -> BackendType:
        """Return the backend type."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False
    ) -> Dict[str, Any]:
        """
        Run one chat completion.

        Args:
            prompt: User message
            system_prompt: Optional system message
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            json_mode: Ask the backend to constrain output to JSON

        Returns:
            {
                "text": str,              # choices[0].message.content
                "model": str,
                "backend": str,
                "prompt_tokens": int,
                "generated_tokens": int,
                "inference_time": float   # seconds
            }

        Raises:
            ConfigurationError: credentials missing
            CompletionRequestError: network failure or non-2xx status
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Check if the backend is available.

        Returns:
            {"healthy": bool, "backend": str, "model": str, "details": str}
        """
        pass

    async def close(self) -> None:
        """Release network resources (no-op by default)."""
        return None

    def get_statistics(self) -> Dict[str, Any]:
        """Get request statistics."""
        avg_time = (
            self._total_request_time / self._request_count
            if self._request_count > 0
            else 0.0
        )

        return {
            "backend": self.backend_type.value,
            "model": self.model_name,
            "request_count": self._request_count,
            "failure_count": self._failure_count,
            "total_request_time": self._total_request_time,
            "average_request_time": avg_time,
        }
