"""Tests for canonical data models."""

import pytest
from decimal import Decimal
from datetime import date

from hours_tool.models import (
    ClassifiedHours,
    EntrySource,
    ImportedEntry,
    InvalidEntryError,
    ManualEntry,
    RateAgreement,
    ReconciliationSlot,
    SlotStatus,
    StrictValidationError,
    TechnicianPeriodSummary,
    to_decimal,
)


class TestToDecimal:
    def test_from_float_uses_repr(self):
        assert to_decimal(7.1) == Decimal("7.1")

    def test_from_string(self):
        assert to_decimal(" 8.5 ") == Decimal("8.5")

    def test_none_raises(self):
        with pytest.raises(InvalidEntryError, match="hours_worked"):
            to_decimal(None, "hours_worked")

    def test_garbage_raises(self):
        with pytest.raises(InvalidEntryError, match="not numeric"):
            to_decimal("eight")

    def test_bool_raises(self):
        with pytest.raises(InvalidEntryError):
            to_decimal(True)


class TestEntries:
    def test_sources(self):
        manual = ManualEntry(id="m", technician_id="T1", date=date(2024, 6, 10), hours_worked=Decimal("1"))
        imported = ImportedEntry(id="w", technician_id="T1", date=date(2024, 6, 10), hours_worked=Decimal("1"))
        assert manual.source is EntrySource.MANUAL
        assert manual.is_manual
        assert imported.source is EntrySource.IMPORTED
        assert not imported.is_manual
        assert imported.verified is False

    def test_display_name(self):
        entry = ManualEntry(
            id="m", technician_id="T1", date=date(2024, 6, 10),
            hours_worked=Decimal("1"), technician_name="Anna",
        )
        assert entry.display_name == "Anna"

    def test_frozen(self):
        entry = ManualEntry(id="m", technician_id="T1", date=date(2024, 6, 10), hours_worked=Decimal("1"))
        with pytest.raises(AttributeError):
            entry.hours_worked = Decimal("2")


class TestClassifiedHours:
    def test_total_hours(self):
        hours = ClassifiedHours(
            regular_hours=Decimal("8"),
            overtime_hours=Decimal("2"),
            weekend_hours=Decimal("0"),
            sunday_hours=Decimal("0"),
            is_weekend=False,
            is_sunday=False,
        )
        assert hours.total_hours == Decimal("10")


class TestRateAgreement:
    def test_valid_rates(self):
        r = RateAgreement("T1", Decimal("20"), Decimal("50"))
        assert r.saturday_rate is None

    def test_negative_rate_raises(self):
        with pytest.raises(ValueError, match="must not be negative"):
            RateAgreement("T1", Decimal("20"), Decimal("50"), sunday_rate=Decimal("-1"))

    def test_nan_rate_raises(self):
        with pytest.raises(ValueError, match="finite"):
            RateAgreement("T1", Decimal("NaN"), Decimal("50"))


class TestReconciliationSlot:
    def _slot(self, manual_hours, imported_hours):
        slot = ReconciliationSlot(technician_id="T1", date=date(2024, 6, 10))
        for i, h in enumerate(manual_hours):
            slot.manual_entries.append(ManualEntry(
                id=f"m{i}", technician_id="T1", date=slot.date, hours_worked=Decimal(h),
            ))
        for i, h in enumerate(imported_hours):
            slot.imported_entries.append(ImportedEntry(
                id=f"w{i}", technician_id="T1", date=slot.date, hours_worked=Decimal(h),
            ))
        return slot

    def test_status_rules(self):
        assert self._slot(["8"], ["8"]).status is SlotStatus.MATCH
        assert self._slot(["8"], ["7"]).status is SlotStatus.DISCREPANCY
        assert self._slot([], ["7"]).status is SlotStatus.MISSING_MANUAL
        assert self._slot(["8"], []).status is SlotStatus.MISSING_WEBHOOK

    def test_authoritative_hours(self):
        assert self._slot(["8"], ["9"]).authoritative_hours == Decimal("8")
        assert self._slot([], ["9"]).authoritative_hours == Decimal("9")

    def test_ids(self):
        slot = self._slot(["4", "4"], ["8"])
        assert slot.manual_ids == ["m0", "m1"]
        assert slot.imported_ids == ["w0"]


class TestTechnicianPeriodSummary:
    def test_profit_and_margin(self):
        s = TechnicianPeriodSummary(
            technician_id="T1",
            technician_name="Anna",
            total_revenue=Decimal("1000"),
            total_cost=Decimal("400"),
        )
        assert s.total_profit == Decimal("600")
        assert s.margin == Decimal("0.6")


class TestStrictValidationError:
    def test_error_message(self):
        err = StrictValidationError(["error 1", "error 2"])
        assert "2 error(s)" in str(err)
        assert err.errors == ["error 1", "error 2"]
