"""Tests for calendar-based hour classification."""

import pytest
from decimal import Decimal
from datetime import date

from hours_tool.engine.classifier import (
    check_hours,
    classify_entries,
    classify_entry,
    classify_hours,
)
from hours_tool.models import ImportedEntry, InvalidEntryError, ManualEntry

# 2024-06-10 is a Monday
MONDAY = date(2024, 6, 10)
FRIDAY = date(2024, 6, 14)
SATURDAY = date(2024, 6, 15)
SUNDAY = date(2024, 6, 16)


def _make_entry(dt: date = MONDAY, hours: str = "8", entry_id: str = "m1") -> ManualEntry:
    return ManualEntry(
        id=entry_id,
        technician_id="T1",
        date=dt,
        hours_worked=Decimal(hours),
    )


class TestClassifyHours:
    """Test classify_hours for individual days."""

    def test_weekday_under_threshold_all_regular(self):
        result = classify_hours(MONDAY, Decimal("6"))
        assert result.regular_hours == Decimal("6")
        assert result.overtime_hours == Decimal("0")
        assert result.weekend_hours == Decimal("0")
        assert result.sunday_hours == Decimal("0")

    def test_weekday_at_threshold_all_regular(self):
        result = classify_hours(FRIDAY, Decimal("8"))
        assert result.regular_hours == Decimal("8")
        assert result.overtime_hours == Decimal("0")

    def test_weekday_over_threshold_splits_overtime(self):
        result = classify_hours(MONDAY, Decimal("10"))
        assert result.regular_hours == Decimal("8")
        assert result.overtime_hours == Decimal("2")
        assert result.is_weekend is False
        assert result.is_sunday is False

    def test_fractional_overtime(self):
        result = classify_hours(MONDAY, Decimal("9.75"))
        assert result.regular_hours == Decimal("8")
        assert result.overtime_hours == Decimal("1.75")

    def test_saturday_all_weekend(self):
        result = classify_hours(SATURDAY, Decimal("6"))
        assert result.weekend_hours == Decimal("6")
        assert result.regular_hours == Decimal("0")
        assert result.overtime_hours == Decimal("0")
        assert result.is_weekend is True
        assert result.is_sunday is False

    def test_saturday_long_day_no_overtime(self):
        result = classify_hours(SATURDAY, Decimal("12"))
        assert result.weekend_hours == Decimal("12")
        assert result.overtime_hours == Decimal("0")

    def test_sunday_all_sunday(self):
        result = classify_hours(SUNDAY, Decimal("4"))
        assert result.sunday_hours == Decimal("4")
        assert result.weekend_hours == Decimal("0")
        assert result.is_sunday is True
        assert result.is_weekend is False

    @pytest.mark.parametrize("dt", [MONDAY, FRIDAY, SATURDAY, SUNDAY])
    @pytest.mark.parametrize("hours", ["0.5", "8", "11.25", "24"])
    def test_buckets_sum_to_input(self, dt, hours):
        result = classify_hours(dt, Decimal(hours))
        assert result.total_hours == Decimal(hours)
        assert result.regular_hours <= Decimal("8")

    def test_accepts_plain_numbers(self):
        result = classify_hours(MONDAY, 9)
        assert result.overtime_hours == Decimal("1")


class TestCheckHours:
    def test_valid_hours_pass(self):
        check_hours(Decimal("0.25"))
        check_hours(Decimal("24"))

    @pytest.mark.parametrize("hours", ["0", "-1", "24.01", "NaN", "Infinity"])
    def test_out_of_range_rejected(self, hours):
        with pytest.raises(InvalidEntryError):
            check_hours(Decimal(hours))


class TestClassifyEntry:
    def test_classifies_valid_entry(self):
        result = classify_entry(_make_entry(hours="10"))
        assert result.hours.overtime_hours == Decimal("2")
        assert result.technician_id == "T1"
        assert result.is_manual is True

    def test_imported_entry_not_manual(self):
        entry = ImportedEntry(id="w1", technician_id="T1", date=MONDAY, hours_worked=Decimal("8"))
        assert classify_entry(entry).is_manual is False

    def test_invalid_entry_message_names_record(self):
        with pytest.raises(InvalidEntryError, match="m9"):
            classify_entry(_make_entry(hours="25", entry_id="m9"))

    def test_batch_skips_invalid_and_reports(self):
        entries = [
            _make_entry(hours="8", entry_id="a"),
            _make_entry(hours="-2", entry_id="b"),
            _make_entry(dt=SUNDAY, hours="3", entry_id="c"),
        ]
        classified, errors = classify_entries(entries)
        assert [c.entry.id for c in classified] == ["a", "c"]
        assert len(errors) == 1
        assert "b" in errors[0]
