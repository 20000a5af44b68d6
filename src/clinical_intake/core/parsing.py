# src/clinical_intake/core/parsing.py
"""
Parsing utilities shared by the normalizer, classifier and pattern extractor.
"""

import re
from datetime import datetime
from typing import Any, Optional, Tuple, Union

# Equivalent of a leading float parse: "98.6°F" -> 98.6, "72 bpm" -> 72
_LEADING_FLOAT = re.compile(r'^\s*([-+]?(?:\d+\.?\d*|\.\d+))')

# Numeric reference interval: "10-20", "3.5 - 5.0 mmol/L"
_RANGE = re.compile(r'(\d+(\.\d+)?)\s*-\s*(\d+(\.\d+)?)')

# Already canonical (or ISO datetime)
_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}')

DATE_FORMATS = [
    "%Y/%m/%d",      # 2025/01/21
    "%Y.%m.%d",      # 2025.01.21
    "%m/%d/%Y",      # 01/21/2025
    "%m-%d-%Y",      # 01-21-2025
    "%d/%m/%Y",      # 21/01/2025
    "%d.%m.%Y",      # 21.01.2025
    "%B %d, %Y",     # January 21, 2025
    "%b %d, %Y",     # Jan 21, 2025
    "%d %B %Y",      # 21 January 2025
    "%d %b %Y",      # 21 Jan 2025
    "%d-%b-%Y",      # 21-Jan-2025
    "%Y%m%d",        # 20250121
]


def parse_float(value: Any) -> Optional[float]:
    """
    Parse the leading number of a value.

    Numbers pass through; strings are read up to the first non-numeric
    character. Returns None when there is no leading number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    match = _LEADING_FLOAT.match(str(value))
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_annotated_number(
    value: Any,
    integer: bool = False
) -> Optional[Union[int, float]]:
    """
    Pull the first unsigned number out of an annotated string.

    Handles values like "98.6°F", "72 bpm", "T: 37.2". Uses [0-9.]+ for
    decimals and [0-9]+ for integers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if integer else float(value)

    pattern = r'([0-9]+)' if integer else r'([0-9.]+)'
    match = re.search(pattern, str(value))
    if not match:
        return None
    try:
        return int(match.group(1)) if integer else float(match.group(1))
    except ValueError:
        # e.g. "..." matched by [0-9.]+
        return None


def parse_reference_range(ref_str: Optional[str]) -> Optional[Tuple[float, float]]:
    """
    Parse a reference range string into (min, max).

    Only the numeric interval form is understood ("12.0-15.5",
    "4.5 - 11.0 x10E3/uL"). Qualitative ranges ("Negative") and one-sided
    limits ("<5") return None.
    """
    if not ref_str:
        return None

    match = _RANGE.search(str(ref_str))
    if not match:
        return None

    try:
        return float(match.group(1)), float(match.group(3))
    except ValueError:
        return None


def canonical_date(date_str: Any) -> str:
    """
    Canonicalize a date to YYYY-MM-DD.

    Unparseable input is returned stripped but otherwise unchanged, so no
    information is lost.
    """
    if date_str is None:
        return ""
    text = str(date_str).strip()
    if not text:
        return ""

    if _ISO_DATE.match(text):
        return text[:10]

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue

    return text
