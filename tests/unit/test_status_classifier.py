# ============================================================================
# tests/unit/test_status_classifier.py
# ============================================================================
"""
Tests for lab status/severity classification and the numeric parsers it uses
"""

import pytest

from clinical_intake.constants import LabSeverity, LabStatus
from clinical_intake.core.parsing import (
    canonical_date,
    parse_annotated_number,
    parse_float,
    parse_reference_range,
)
from clinical_intake.core.status_classifier import classify, is_classifiable


class TestClassify:
    """Deviation bands relative to the range width"""

    @pytest.mark.parametrize("value", ["10", "15", "20", 15, 12.5])
    def test_inside_range_is_normal(self, value):
        result = classify(value, "10-20")
        assert result.status == LabStatus.NORMAL
        assert result.severity == LabSeverity.NORMAL

    @pytest.mark.parametrize("value, status, severity", [
        ("22", LabStatus.HIGH, LabSeverity.NORMAL),
        ("25", LabStatus.HIGH, LabSeverity.WARNING),
        ("26", LabStatus.HIGH, LabSeverity.CRITICAL),
        ("100", LabStatus.HIGH, LabSeverity.CRITICAL),
        ("8", LabStatus.LOW, LabSeverity.NORMAL),
        ("6", LabStatus.LOW, LabSeverity.WARNING),
        ("0", LabStatus.LOW, LabSeverity.CRITICAL),
    ])
    def test_outside_range(self, value, status, severity):
        result = classify(value, "10-20")
        assert result.status == status
        assert result.severity == severity

    def test_annotated_value_and_range(self):
        """Test units on either side do not break parsing"""
        result = classify("25 mg/dL", "10 - 20 mg/dL")
        assert result.status == LabStatus.HIGH
        assert result.severity == LabSeverity.WARNING

    @pytest.mark.parametrize("value, reference_range", [
        ("positive", "10-20"),
        ("15", "Negative"),
        ("15", "<5"),
        (None, "10-20"),
        ("", "10-20"),
        ("15", None),
    ])
    def test_non_numeric_is_normal(self, value, reference_range):
        result = classify(value, reference_range)
        assert result.status == LabStatus.NORMAL
        assert result.severity == LabSeverity.NORMAL

    def test_zero_width_range(self):
        """Test a degenerate range flags any outside value as critical"""
        assert classify("5", "5-5").severity == LabSeverity.NORMAL

        result = classify("5.1", "5-5")
        assert result.status == LabStatus.HIGH
        assert result.severity == LabSeverity.CRITICAL

    def test_is_classifiable(self):
        assert is_classifiable("7.2", "4.5-11.0")
        assert not is_classifiable("trace", "4.5-11.0")
        assert not is_classifiable("7.2", "negative")


class TestParsing:

    def test_parse_float(self):
        assert parse_float("98.6°F") == 98.6
        assert parse_float("72 bpm") == 72.0
        assert parse_float(3) == 3.0
        assert parse_float("bpm 72") is None
        assert parse_float(True) is None

    def test_parse_annotated_number(self):
        assert parse_annotated_number("T: 37.2") == 37.2
        assert parse_annotated_number("72 bpm", integer=True) == 72
        assert parse_annotated_number("about 98.6", integer=True) == 98
        assert parse_annotated_number("...") is None
        assert parse_annotated_number("n/a") is None

    def test_parse_reference_range(self):
        assert parse_reference_range("12.0-15.5") == (12.0, 15.5)
        assert parse_reference_range("4.5 - 11.0 x10E3/uL") == (4.5, 11.0)
        assert parse_reference_range("Negative") is None
        assert parse_reference_range("") is None

    @pytest.mark.parametrize("raw, expected", [
        ("2025-01-21", "2025-01-21"),
        ("2025-01-21T08:30:00", "2025-01-21"),
        ("2025/01/21", "2025-01-21"),
        ("01/21/2025", "2025-01-21"),
        ("January 21, 2025", "2025-01-21"),
        ("21 Jan 2025", "2025-01-21"),
        ("early 2020", "early 2020"),
        (None, ""),
    ])
    def test_canonical_date(self, raw, expected):
        assert canonical_date(raw) == expected
