"""Tests for entry validation engine."""

import pytest
from decimal import Decimal
from datetime import date

from hours_tool.engine.validator import validate_entries
from hours_tool.models import ImportedEntry, ManualEntry, StrictValidationError


def _make_entry(**kwargs) -> ManualEntry:
    defaults = dict(
        id="m1",
        technician_id="T1",
        date=date(2024, 6, 10),
        hours_worked=Decimal("8"),
    )
    defaults.update(kwargs)
    return ManualEntry(**defaults)


class TestValidator:
    def test_valid_entries_pass(self):
        entries = [_make_entry()]
        valid, errors = validate_entries(entries)
        assert valid == entries
        assert errors == []

    def test_zero_hours_rejected(self):
        valid, errors = validate_entries([_make_entry(hours_worked=Decimal("0"))])
        assert valid == []
        assert "must be positive" in errors[0]

    def test_negative_hours_rejected(self):
        valid, errors = validate_entries([_make_entry(hours_worked=Decimal("-3"))])
        assert valid == []
        assert len(errors) == 1

    def test_over_24_rejected(self):
        valid, errors = validate_entries([_make_entry(hours_worked=Decimal("24.5"))])
        assert valid == []
        assert "> 24" in errors[0]

    def test_exactly_24_accepted(self):
        valid, errors = validate_entries([_make_entry(hours_worked=Decimal("24"))])
        assert len(valid) == 1
        assert errors == []

    def test_nan_rejected(self):
        valid, errors = validate_entries([_make_entry(hours_worked=Decimal("NaN"))])
        assert valid == []
        assert "not finite" in errors[0]

    def test_duplicate_id_rejected(self):
        entries = [_make_entry(id="x"), _make_entry(id="x", hours_worked=Decimal("2"))]
        valid, errors = validate_entries(entries)
        assert len(valid) == 1
        assert "duplicate" in errors[0]

    def test_daily_manual_total_over_24_reported_not_skipped(self):
        entries = [
            _make_entry(id="a", hours_worked=Decimal("14")),
            _make_entry(id="b", hours_worked=Decimal("12")),
        ]
        valid, errors = validate_entries(entries)
        assert len(valid) == 2
        assert len(errors) == 1
        assert "aggregated manual daily total=26" in errors[0]

    def test_imported_daily_total_not_checked(self):
        entries = [
            ImportedEntry(id="a", technician_id="T1", date=date(2024, 6, 10), hours_worked=Decimal("14")),
            ImportedEntry(id="b", technician_id="T1", date=date(2024, 6, 10), hours_worked=Decimal("12")),
        ]
        valid, errors = validate_entries(entries)
        assert len(valid) == 2
        assert errors == []

    def test_multiple_errors_collected(self):
        entries = [
            _make_entry(id="a", hours_worked=Decimal("0")),
            _make_entry(id="b", hours_worked=Decimal("30")),
        ]
        _, errors = validate_entries(entries)
        assert len(errors) == 2

    def test_strict_raises(self):
        with pytest.raises(StrictValidationError) as exc_info:
            validate_entries([_make_entry(hours_worked=Decimal("0"))], strict=True)
        assert len(exc_info.value.errors) == 1

    def test_strict_passes_clean_input(self):
        valid, errors = validate_entries([_make_entry()], strict=True)
        assert len(valid) == 1
