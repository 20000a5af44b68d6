# ============================================================================
# src/clinical_intake/completion/openrouter_client.py
# ============================================================================
"""
OpenRouter Completion Client

Talks to an OpenAI-compatible chat completions endpoint (OpenRouter by
default) with a bearer token. Timeouts are owned by the caller's retry
schedule: the caller cancels the request when its attempt budget runs out.

Config options:
    api_url: Endpoint URL
    api_key: Bearer token
    model: Model identifier
    max_tokens: Default max tokens (default: 2000)
    temperature: Default temperature (default: 0.01)
    referer / title: OpenRouter attribution headers
"""

import aiohttp
import asyncio
from typing import Dict, Any, List, Optional, Tuple
from datetime import datetime

from .base import BaseCompletionClient, BackendType
from ..utils.exceptions import CompletionRequestError, ConfigurationError


DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "tngtech/deepseek-r1t-chimera:free"


class OpenRouterCompletionClient(BaseCompletionClient):
    """OpenAI-compatible chat completion client over aiohttp."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.api_url = self.config.get('api_url') or DEFAULT_API_URL
        self.api_key = self.config.get('api_key')
        self._model_name = self.config.get('model') or DEFAULT_MODEL

        self.default_max_tokens = self.config.get('max_tokens', 2000)
        self.default_temperature = self.config.get('temperature', 0.01)
        self.referer = self.config.get('referer', 'http://localhost:3000')
        self.title = self.config.get('title', 'Medical Data Extraction')

        # HTTP session (created lazily, tied to event loop)
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

        if not self.api_key:
            self.logger.warning(
                "Completion API key not configured. Set COMPLETION_API_KEY or OPENROUTER_API_KEY."
            )
        self.logger.info(f"Initialized completion client: {self.api_url} / {self._model_name}")

    @property
    def backend_type(self) -> BackendType:
        return BackendType.OPENROUTER

    @property
    def model_name(self) -> str:
        return self._model_name

    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session for current event loop."""
        current_loop = asyncio.get_running_loop()

        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not current_loop
        )

        if needs_new_session:
            if self._session is not None and not self._session.closed:
                await self._session.close()

            timeout = aiohttp.ClientTimeout(
                total=None,       # Per-attempt budget enforced by the caller
                sock_connect=30,
            )
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._session_loop = current_loop

        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._session_loop = None

    def _headers(self) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}',
            'HTTP-Referer': self.referer,
            'X-Title': self.title,
        }

    def build_payload(
        self,
        prompt: str,
        system_prompt: Optional[str],
        max_tokens: int,
        temperature: float,
        json_mode: bool
    ) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({'role': 'system', 'content': system_prompt})
        messages.append({'role': 'user', 'content': prompt})

        payload = {
            'model': self._model_name,
            'messages': messages,
            'temperature': temperature,
            'max_tokens': max_tokens,
        }
        if json_mode:
            payload['response_format'] = {'type': 'json_object'}
        return payload

    async def health_check(self) -> Dict[str, Any]:
        if not self.is_configured():
            return {
                "healthy": False,
                "backend": self.backend_type.value,
                "model": self._model_name,
                "details": "API key not configured"
            }
        return {
            "healthy": True,
            "backend": self.backend_type.value,
            "model": self._model_name,
            "details": f"Configured for {self.api_url}"
        }

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False
    ) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("Completion API key not found")

        start_time = datetime.now()
        max_tokens = max_tokens or self.default_max_tokens
        temperature = temperature if temperature is not None else self.default_temperature
        payload = self.build_payload(prompt, system_prompt, max_tokens, temperature, json_mode)

        try:
            session = await self._get_session()
            async with session.post(self.api_url, json=payload, headers=self._headers()) as response:
                if response.status < 200 or response.status >= 300:
                    error_text = await response.text()
                    self._failure_count += 1
                    raise CompletionRequestError(
                        f"Completion API error ({response.status}): {error_text[:300]}",
                        status=response.status
                    )
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    self._failure_count += 1
                    raise CompletionRequestError(
                        f"Completion API returned a non-JSON body ({response.status}): {e}",
                        status=response.status
                    )

        except aiohttp.ClientError as e:
            self._failure_count += 1
            raise CompletionRequestError(f"Cannot reach completion endpoint {self.api_url}: {e}")

        text, usage = self._read_completion(data)

        inference_time = (datetime.now() - start_time).total_seconds()
        self._request_count += 1
        self._total_request_time += inference_time

        self.logger.info(
            f"Completion received in {inference_time:.2f}s "
            f"({usage.get('completion_tokens', 0)} tokens, {len(text)} chars)"
        )

        return {
            "text": text.strip(),
            "model": data.get('model', self._model_name),
            "backend": self.backend_type.value,
            "prompt_tokens": usage.get('prompt_tokens', 0),
            "generated_tokens": usage.get('completion_tokens', 0),
            "inference_time": inference_time,
        }

    def _read_completion(self, data: Any) -> Tuple[str, Dict[str, Any]]:
        """Pull `choices[0].message.content` and `usage` out of a response body."""
        choices = data.get('choices') if isinstance(data, dict) else None
        if not isinstance(choices, list) or not all(isinstance(c, dict) for c in choices):
            self._failure_count += 1
            raise CompletionRequestError(f"Unexpected completion response shape: {str(data)[:300]}")

        message = (choices[0].get('message') or {}) if choices else {}
        text = message.get('content') if isinstance(message, dict) else None
        if text is not None and not isinstance(text, str):
            self._failure_count += 1
            raise CompletionRequestError(f"Unexpected completion content: {str(text)[:300]}")

        usage = data.get('usage')
        return text or '', usage if isinstance(usage, dict) else {}

    def get_statistics(self) -> Dict[str, Any]:
        stats = super().get_statistics()
        stats["api_url"] = self.api_url
        return stats
