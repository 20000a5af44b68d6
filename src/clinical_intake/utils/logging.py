# ============================================================================
# src/clinical_intake/utils/logging.py
# ============================================================================
"""
Logging setup for the clinical intake engine.

- setup_logging(): console (+ optional file) handlers, text or JSON lines
- LogContext: stamps patient_id / filename onto every record in a block
- log_performance: timing decorator for sync and async pipeline steps
"""

import asyncio
import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Optional

# Fields LogContext may attach; JsonFormatter emits whichever are present
CONTEXT_FIELDS = ("patient_id", "filename", "lab_id")

# Libraries that log every request or PDF object at INFO
NOISY_LOGGERS = ("aiohttp.access", "PyPDF2", "pypdfium2", "httpx", "multipart")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_json: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        format_json: Emit one JSON object per line
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


_log_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar('log_context', default=None)
_factory_installed = False


def current_log_context() -> Dict[str, Any]:
    """Context fields active in the current task or thread."""
    return dict(_log_context.get() or {})


def _install_record_factory() -> None:
    """Wrap the record factory once; it reads the context variable per record."""
    global _factory_installed
    if _factory_installed:
        return

    base_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = base_factory(*args, **kwargs)
        for key, value in (_log_context.get() or {}).items():
            setattr(record, key, value)
        return record

    logging.setLogRecordFactory(record_factory)
    _factory_installed = True


class LogContext:
    """
    Attach context fields to every log record created inside the block.

    Usage:
        with LogContext(logger, patient_id="p-1", filename="labs.pdf"):
            logger.info("Importing")   # record.patient_id == "p-1"

    Fields live in a ContextVar, so each asyncio task (or thread) sees only
    its own block. Nested blocks add to the enclosing fields.
    """

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self.context = {k: v for k, v in context.items() if k in CONTEXT_FIELDS and v}
        self._token: Optional[Token] = None

    def __enter__(self):
        _install_record_factory()
        self._token = _log_context.set({**current_log_context(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
        self._token = None


def log_performance(logger: logging.Logger, operation: str):
    """
    Log how long a pipeline step took (debug) or how long it ran before failing (error).

    Works on plain functions and coroutine functions.
    """
    def decorator(func):
        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = datetime.now()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    duration = (datetime.now() - start_time).total_seconds()
                    logger.error(f"{operation} failed after {duration:.3f}s: {e}")
                    raise
                duration = (datetime.now() - start_time).total_seconds()
                logger.info(f"{operation} completed in {duration:.3f}s")
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = datetime.now()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                logger.error(f"{operation} failed after {duration:.3f}s: {e}")
                raise
            duration = (datetime.now() - start_time).total_seconds()
            logger.debug(f"{operation} completed in {duration:.3f}s")
            return result

        return wrapper
    return decorator
