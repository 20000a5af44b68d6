# ============================================================================
# src/clinical_intake/core/batch_orchestrator.py
# ============================================================================
"""
Chunked Batch Orchestrator (lab report import)

Pipeline for one lab report:
1. Split text into line-aligned chunks (~2000 chars, lines never split)
2. One completion call per chunk (JSON array of lab tests); a failed chunk is
   logged and skipped without affecting its siblings
3. Concatenate chunk arrays in chunk order
4. Drop rows without test name, test date or result value
5. Normalize (category -> Other, status/severity -> normal when absent) and
   persist each row on its own; one failed insert does not stop the rest

Re-importing the same report creates new rows (no deduplication).
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from .json_parsing import ARRAY, parse_model_json
from .normalizer import is_valid_lab_row, normalize_lab_row
from .retry import ExtractionAttempt, retry_with_timeouts
from ..completion.base import BaseCompletionClient
from ..config import completion_settings, extraction_settings
from ..prompts import build_lab_prompt, build_lab_system_prompt
from ..records.lab import ImportSummary
from ..storage.base import PatientStore
from ..utils.logging import LogContext, log_performance

logger = logging.getLogger(__name__)


def chunk_text(text: str, max_chars: int = 2000) -> List[str]:
    """
    Split text into newline-respecting chunks of at most `max_chars`.

    Lines are never split: a single line longer than the budget becomes a
    chunk of its own. Joining the chunks with "\\n" reproduces the input.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")
    if not text:
        return []

    chunks: List[str] = []
    current: List[str] = []
    current_len = 0

    for line in text.split("\n"):
        added = len(line) + (1 if current else 0)
        if current and current_len + added > max_chars:
            chunks.append("\n".join(current))
            current = [line]
            current_len = len(line)
        else:
            current.append(line)
            current_len += added

    if current:
        chunks.append("\n".join(current))

    return chunks


class LabImportOrchestrator:
    """
    Extracts lab tests from report text and persists them one by one.

    Usage:
        orchestrator = LabImportOrchestrator(client, store)
        summary = await orchestrator.import_text(text, patient_id="p-1")
        print(summary.message)   # "imported 12 of 12 tests"
    """

    def __init__(
        self,
        client: BaseCompletionClient,
        store: PatientStore,
        chunk_size: Optional[int] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeouts: Optional[Sequence[float]] = None,
        retry_delay: Optional[float] = None,
        max_concurrency: Optional[int] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        self.client = client
        self.store = store
        self.chunk_size = chunk_size or extraction_settings.LAB_CHUNK_SIZE
        self.temperature = (
            temperature if temperature is not None else extraction_settings.LAB_TEMPERATURE
        )
        self.max_tokens = max_tokens or completion_settings.COMPLETION_MAX_TOKENS
        self.timeouts = list(timeouts or completion_settings.COMPLETION_ATTEMPT_TIMEOUTS)
        self.retry_delay = (
            retry_delay if retry_delay is not None else completion_settings.COMPLETION_RETRY_DELAY
        )
        self.max_concurrency = max(1, max_concurrency or extraction_settings.LAB_MAX_CONCURRENCY)
        self._sleep = sleep
        self.system_prompt = build_lab_system_prompt()
        self.logger = logging.getLogger(__name__)

    async def extract_chunk(self, chunk: str, index: int = 0) -> List[Dict[str, Any]]:
        """
        Extract the lab test objects of one chunk.

        Raises:
            ExtractionError / ConfigurationError once every attempt failed
        """
        prompt = build_lab_prompt(chunk)

        async def call_model(attempt: ExtractionAttempt) -> List[Any]:
            response = await self.client.generate(
                prompt,
                system_prompt=self.system_prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                json_mode=True,
            )
            return parse_model_json(response.get("text"), ARRAY, fragment_key="test_name")

        tests = await retry_with_timeouts(
            call_model,
            self.timeouts,
            delay=self.retry_delay,
            label=f"lab chunk {index + 1}",
            sleep=self._sleep,
        )
        return list(tests)

    async def collect(self, text: str) -> Tuple[List[Any], int, List[int]]:
        """
        Run every chunk and concatenate the results in chunk order.

        Returns:
            (candidate rows, chunk count, indices of failed chunks)
        """
        chunks = chunk_text(text, self.chunk_size)
        self.logger.info(f"Split text into {len(chunks)} chunks")

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(index: int, chunk: str) -> Optional[List[Any]]:
            if not chunk.strip():
                return []
            async with semaphore:
                try:
                    return await self.extract_chunk(chunk, index)
                except Exception as e:
                    self.logger.error(
                        f"Chunk {index + 1}/{len(chunks)} skipped: {type(e).__name__}: {e}"
                    )
                    return None

        results = await asyncio.gather(*(run(i, c) for i, c in enumerate(chunks)))

        candidates: List[Any] = []
        failed: List[int] = []
        for index, rows in enumerate(results):
            if rows is None:
                failed.append(index)
            else:
                candidates.extend(rows)

        return candidates, len(chunks), failed

    @log_performance(logger, "lab import")
    async def import_text(self, text: str, patient_id: str) -> ImportSummary:
        """
        Extract, validate and persist all lab tests found in `text`.

        Args:
            text: Full report text
            patient_id: Patient the rows belong to

        Returns:
            ImportSummary with the persisted records
        """
        summary = ImportSummary(patient_id=str(patient_id))

        with LogContext(self.logger, patient_id=str(patient_id)):
            candidates, summary.chunk_count, summary.failed_chunks = await self.collect(text)
            summary.candidate_count = len(candidates)

            valid = []
            for row in candidates:
                if is_valid_lab_row(row):
                    valid.append(row)
                else:
                    self.logger.warning(f"Skipping invalid test object: {row!r}"[:300])
            summary.invalid_count = len(candidates) - len(valid)
            self.logger.info(f"Total parsed lab tests: {len(valid)}")

            for row in valid:
                record = normalize_lab_row(row, patient_id)
                try:
                    saved = await self.store.create_lab_result(record)
                except Exception as e:
                    summary.failed_count += 1
                    self.logger.error(
                        f"Error saving test {record.test_name!r}: {type(e).__name__}: {e}"
                    )
                    continue
                summary.imported.append(saved)

        self.logger.info(f"Lab import for patient {patient_id}: {summary.message}")
        return summary
