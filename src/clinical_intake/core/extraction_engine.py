# ============================================================================
# src/clinical_intake/core/extraction_engine.py
# ============================================================================
"""
Field Extraction Engine

Turns raw document text into a raw patient record:

1. Truncate to the character budget (default 4000)
2. Ask the completion model for one JSON object (translate, then extract)
3. Retry with escalating per-attempt timeouts (60s / 65s / 70s)
4. Parse through the JSON strategy chain; unparseable output fails the attempt
5. Degrade to the pattern extractor when every attempt fails, and complete
   the model result with it when both critical fields (name, chief
   complaint) are missing

The engine never raises past its fallback boundary: callers always receive a
(possibly sparse) record.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple

from .json_parsing import OBJECT, parse_model_json
from .normalizer import canonical_keys, normalize
from .retry import ExtractionAttempt, retry_with_timeouts
from ..completion.base import BaseCompletionClient
from ..config import completion_settings, extraction_settings
from ..extractors.pattern_extractor import PatternExtractor
from ..prompts import PATIENT_SYSTEM_PROMPT, build_patient_prompt
from ..records.extraction import ExtractionResult, ExtractionSource
from ..utils.logging import log_performance

logger = logging.getLogger(__name__)

CRITICAL_FIELDS = ("full_name", "chief_complaint")


def is_empty(value: Any) -> bool:
    """Empty for merge purposes: None, "", [], {}, False, 0."""
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return False


def merge_raw(primary: Dict[str, Any], fallback: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two raw records, preferring non-empty values from `primary`.

    Nested dicts are merged key by key so a sparse model section does not hide
    flags the fallback found.
    """
    merged: Dict[str, Any] = {}
    for key in list(fallback.keys()) + [k for k in primary.keys() if k not in fallback]:
        ours = primary.get(key)
        theirs = fallback.get(key)
        if isinstance(ours, dict) and isinstance(theirs, dict):
            merged[key] = merge_raw(ours, theirs)
        elif not is_empty(ours):
            merged[key] = ours
        elif key in fallback:
            merged[key] = theirs
        else:
            merged[key] = ours
    return merged


def missing_critical_fields(raw: Dict[str, Any]) -> bool:
    """True when the model result carries none of the critical fields."""
    return all(is_empty(raw.get(key)) for key in CRITICAL_FIELDS)


class FieldExtractionEngine:
    """
    Remote-first, pattern-fallback extraction for single documents.

    Usage:
        engine = FieldExtractionEngine(client)
        result = await engine.extract_patient(text)
        print(result.message)   # "extracted 9 of 17 fields"
    """

    def __init__(
        self,
        client: BaseCompletionClient,
        pattern_extractor: Optional[PatternExtractor] = None,
        char_budget: Optional[int] = None,
        timeouts: Optional[Sequence[float]] = None,
        retry_delay: Optional[float] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        self.client = client
        self.pattern_extractor = pattern_extractor or PatternExtractor()
        self.char_budget = char_budget or extraction_settings.DOCUMENT_CHAR_BUDGET
        self.timeouts = list(timeouts or completion_settings.COMPLETION_ATTEMPT_TIMEOUTS)
        self.retry_delay = (
            retry_delay if retry_delay is not None else completion_settings.COMPLETION_RETRY_DELAY
        )
        self.temperature = (
            temperature if temperature is not None else completion_settings.COMPLETION_TEMPERATURE
        )
        self.max_tokens = max_tokens or completion_settings.COMPLETION_MAX_TOKENS
        self._sleep = sleep
        self.logger = logging.getLogger(__name__)

    async def extract(self, text: str) -> Dict[str, Any]:
        """
        Extract a raw record from document text.

        Args:
            text: Full document text

        Returns:
            Raw record (model schema). Equals the pattern extractor output
            exactly when no attempt produced parseable content.
        """
        raw, _, _ = await self._run(text)
        return raw

    @log_performance(logger, "patient extraction")
    async def extract_patient(self, text: str) -> ExtractionResult:
        """Extract and normalize into a PatientRecord."""
        raw, source, attempts = await self._run(text)
        record = normalize(raw)
        result = ExtractionResult(record=record, source=source, attempts=attempts, raw=raw)
        self.logger.info(f"Patient extraction via {source.value}: {result.message}")
        return result

    async def _run(self, text: str) -> Tuple[Dict[str, Any], ExtractionSource, int]:
        text = text or ""
        document = text[:self.char_budget]
        prompt = build_patient_prompt(document)
        attempts_used = 0

        async def call_model(attempt: ExtractionAttempt) -> Dict[str, Any]:
            nonlocal attempts_used
            attempts_used = attempt.number
            response = await self.client.generate(
                prompt,
                system_prompt=PATIENT_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            return parse_model_json(response.get("text"), OBJECT, fragment_key="full_name")

        try:
            model_raw = await retry_with_timeouts(
                call_model,
                self.timeouts,
                delay=self.retry_delay,
                label="patient extraction",
                sleep=self._sleep,
            )
        except Exception as e:
            self.logger.warning(
                f"Model extraction unavailable ({type(e).__name__}: {e}), "
                f"falling back to pattern matching"
            )
            return self.pattern_extractor.extract(text), ExtractionSource.PATTERN, attempts_used

        if missing_critical_fields(model_raw):
            self.logger.info("Critical fields missing from model output, completing with pattern matching")
            fallback = self.pattern_extractor.extract(text)
            return merge_raw(canonical_keys(model_raw), fallback), ExtractionSource.MERGED, attempts_used

        return model_raw, ExtractionSource.MODEL, attempts_used
