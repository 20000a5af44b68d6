# ============================================================================
# src/clinical_intake/core/json_parsing.py
# ============================================================================
"""
JSON recovery for model output.

Models are asked for bare JSON but often wrap it in prose or markdown, or
truncate an array mid-object. Parsing runs an ordered chain of strategies,
each returning the parsed value or None; the first hit wins:

1. direct       - json.loads on the whole content
2. bracketed    - first {...} / [{...}] literal, then json_repair on that block
3. fragments    - individual {"key": ...} objects re-wrapped into an array

The chain raises ExtractionParseError only when every strategy misses.
"""

import json
import logging
import re
from typing import Any, Callable, List, Optional, Sequence

from json_repair import repair_json

from ..utils.exceptions import ExtractionParseError

logger = logging.getLogger(__name__)

OBJECT = "object"
ARRAY = "array"

_OBJECT_LITERAL = re.compile(r'\{[\s\S]*\}')
_ARRAY_LITERAL = re.compile(r'\[\s*\{[\s\S]*\}\s*\]')
_FENCE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)

Strategy = Callable[[str, str], Optional[Any]]


def _accepts(value: Any, mode: str) -> bool:
    if mode == ARRAY:
        return isinstance(value, list)
    return isinstance(value, dict)


def _coerce(value: Any, mode: str) -> Any:
    """Array mode tolerates a lone object or an object wrapping the array."""
    if mode == ARRAY and isinstance(value, dict):
        for candidate in value.values():
            if isinstance(candidate, list):
                return candidate
        return [value]
    return value


def parse_direct(content: str, mode: str) -> Optional[Any]:
    text = _FENCE.sub('', content.strip())
    try:
        value = _coerce(json.loads(text), mode)
    except json.JSONDecodeError:
        return None
    return value if _accepts(value, mode) else None


def parse_bracketed(content: str, mode: str) -> Optional[Any]:
    pattern = _ARRAY_LITERAL if mode == ARRAY else _OBJECT_LITERAL
    match = pattern.search(content)
    if not match:
        return None

    block = match.group(0)
    try:
        value = json.loads(block)
    except json.JSONDecodeError:
        try:
            value = repair_json(block, return_objects=True)
        except Exception as e:
            logger.debug(f"json_repair failed on bracketed block: {e}")
            return None
        logger.debug("json_repair fixed bracketed block")

    value = _coerce(value, mode)
    return value if _accepts(value, mode) else None


def parse_fragments(content: str, mode: str, key: str = "test_name") -> Optional[Any]:
    """Re-wrap complete object fragments that start with a known key."""
    fragment = re.compile(r'\{\s*"' + re.escape(key) + r'"[\s\S]*?\}\s*(?=,|\]|$)')
    matches = fragment.findall(content)
    if not matches:
        return None

    parsed: List[Any] = []
    for item in matches:
        try:
            parsed.append(json.loads(item))
        except json.JSONDecodeError:
            continue

    if not parsed:
        return None
    if mode == OBJECT:
        return parsed[0] if isinstance(parsed[0], dict) else None
    return parsed


def parse_model_json(
    content: Optional[str],
    mode: str = OBJECT,
    fragment_key: str = "test_name",
    strategies: Optional[Sequence[Strategy]] = None
) -> Any:
    """
    Parse model output through the strategy chain.

    Args:
        content: Raw completion text
        mode: "object" or "array"
        fragment_key: Leading key that identifies object fragments
        strategies: Override the default chain (tests)

    Returns:
        dict (object mode) or list (array mode)

    Raises:
        ExtractionParseError: every strategy missed
    """
    if not content or not content.strip():
        raise ExtractionParseError("Empty completion content", content or "")

    chain = strategies or (
        parse_direct,
        parse_bracketed,
        lambda text, m: parse_fragments(text, m, fragment_key),
    )

    for strategy in chain:
        value = strategy(content, mode)
        if value is not None:
            return value

    raise ExtractionParseError(
        f"Could not parse JSON {mode} from completion",
        content[:500]
    )
