# ============================================================================
# tests/unit/test_logging.py
# ============================================================================
"""
Tests for logging setup, per-task log context and the timing decorator
"""

import asyncio
import json
import logging

import pytest

from clinical_intake.utils.logging import (
    JsonFormatter,
    LogContext,
    current_log_context,
    log_performance,
)


@pytest.fixture
def captured():
    """Records emitted on the `tests.logging` logger, formatted as JSON dicts"""
    logger = logging.getLogger("tests.logging")
    formatter = JsonFormatter()
    lines = []

    class Capture(logging.Handler):
        def emit(self, record):
            lines.append(json.loads(formatter.format(record)))

    handler = Capture()
    logger.addHandler(handler)
    old_level = logger.level
    logger.setLevel(logging.DEBUG)
    yield logger, lines
    logger.removeHandler(handler)
    logger.setLevel(old_level)


class TestLogContext:

    def test_fields_reach_json(self, captured):
        logger, lines = captured

        with LogContext(logger, patient_id="p-1", filename="labs.pdf"):
            logger.info("importing")
        logger.info("outside")

        inside, outside = lines
        assert inside["patient_id"] == "p-1"
        assert inside["filename"] == "labs.pdf"
        assert inside["message"] == "importing"
        assert "patient_id" not in outside

    def test_unknown_and_empty_fields_dropped(self):
        context = LogContext(logging.getLogger("tests.logging"), patient_id="", chunk=3, lab_id="l-1")
        assert context.context == {"lab_id": "l-1"}

    def test_nested_blocks_merge_and_restore(self, captured):
        logger, lines = captured

        with LogContext(logger, patient_id="p-1"):
            with LogContext(logger, lab_id="l-9"):
                logger.info("inner")
            logger.info("outer")

        inner, outer = lines
        assert (inner["patient_id"], inner["lab_id"]) == ("p-1", "l-9")
        assert outer["patient_id"] == "p-1"
        assert "lab_id" not in outer
        assert current_log_context() == {}

    @pytest.mark.asyncio
    async def test_interleaved_tasks_keep_their_own_fields(self, captured):
        """Test A enters, B enters, A exits, B exits leaves nothing behind"""
        logger, lines = captured
        a_entered = asyncio.Event()
        b_entered = asyncio.Event()
        a_exited = asyncio.Event()

        async def request_a():
            with LogContext(logger, patient_id="A"):
                a_entered.set()
                await b_entered.wait()
                logger.info("a working")
            a_exited.set()

        async def request_b():
            await a_entered.wait()
            with LogContext(logger, patient_id="B"):
                b_entered.set()
                await a_exited.wait()
                logger.info("b working")

        await asyncio.gather(request_a(), request_b())
        logger.info("after both")

        by_message = {line["message"]: line for line in lines}
        assert by_message["a working"]["patient_id"] == "A"
        assert by_message["b working"]["patient_id"] == "B"
        assert "patient_id" not in by_message["after both"]
        assert current_log_context() == {}


class TestJsonFormatter:

    def test_exception_included(self, captured):
        logger, lines = captured
        try:
            raise ValueError("bad row")
        except ValueError:
            logger.exception("save failed")

        assert lines[0]["level"] == "ERROR"
        assert "ValueError: bad row" in lines[0]["exception"]


class TestLogPerformance:

    @pytest.mark.asyncio
    async def test_async_success_logged(self, captured):
        logger, lines = captured

        @log_performance(logger, "lab import")
        async def work():
            return 42

        assert await work() == 42
        assert lines[-1]["level"] == "INFO"
        assert lines[-1]["message"].startswith("lab import completed in")

    @pytest.mark.asyncio
    async def test_async_failure_reraised(self, captured):
        logger, lines = captured

        @log_performance(logger, "lab import")
        async def work():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await work()
        assert lines[-1]["level"] == "ERROR"
        assert "lab import failed after" in lines[-1]["message"]

    def test_sync_success_logged_at_debug(self, captured):
        logger, lines = captured

        @log_performance(logger, "pattern extraction")
        def work(text):
            return text.upper()

        assert work("abc") == "ABC"
        assert work.__name__ == "work"
        assert lines[-1]["level"] == "DEBUG"
