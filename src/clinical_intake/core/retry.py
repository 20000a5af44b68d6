# ============================================================================
# src/clinical_intake/core/retry.py
# ============================================================================
"""
Retry with per-attempt timeouts.

Each attempt gets its own timeout budget from an escalating schedule
(e.g. 60s / 65s / 70s). When the budget elapses the in-flight coroutine is
cancelled via asyncio.wait_for and the attempt counts as failed. Shared by the
single-document extraction path and the lab import chunks.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Tuple, Type, TypeVar

from ..utils.exceptions import (
    ConfigurationError,
    ExtractionError,
    ExtractionTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE: Tuple[Type[BaseException], ...] = (ExtractionError, ConfigurationError)


@dataclass(frozen=True)
class ExtractionAttempt:
    """Ephemeral state of one attempt."""
    number: int          # 1-based
    max_attempts: int
    timeout: float       # seconds

    @property
    def is_last(self) -> bool:
        return self.number >= self.max_attempts


async def retry_with_timeouts(
    operation: Callable[[ExtractionAttempt], Awaitable[T]],
    timeouts: Sequence[float],
    delay: float = 0.0,
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE,
    label: str = "operation",
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Run `operation` until it succeeds or the timeout schedule is exhausted.

    Args:
        operation: Coroutine factory receiving the current attempt
        timeouts: Per-attempt timeout budget; its length is the attempt count
        delay: Pause between failed attempts (seconds)
        retry_on: Exception types that count as attempt failures
        label: Name used in log messages
        sleep: Injectable sleep (tests)

    Returns:
        The first successful result

    Raises:
        The last attempt's error once every attempt has failed
    """
    if not timeouts:
        raise ValueError("timeouts must contain at least one entry")

    sleep = sleep or asyncio.sleep
    max_attempts = len(timeouts)
    last_error: Optional[BaseException] = None

    for number, timeout in enumerate(timeouts, start=1):
        attempt = ExtractionAttempt(number=number, max_attempts=max_attempts, timeout=timeout)
        logger.info(f"{label}: attempt {number}/{max_attempts} with timeout {timeout:.0f}s")

        try:
            return await asyncio.wait_for(operation(attempt), timeout=timeout)

        except asyncio.TimeoutError:
            last_error = ExtractionTimeoutError(
                f"{label} timed out after {timeout:.0f}s", timeout
            )
            logger.warning(f"{label}: attempt {number} aborted after {timeout:.0f}s")

        except retry_on as e:
            last_error = e
            logger.warning(f"{label}: attempt {number} failed: {type(e).__name__}: {e}")

        if not attempt.is_last and delay > 0:
            await sleep(delay)

    logger.error(f"{label}: all {max_attempts} attempts failed")
    raise last_error
