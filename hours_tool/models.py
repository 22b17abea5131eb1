"""Canonical data model for hour reconciliation and billing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import ClassVar

ZERO = Decimal("0")
CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round a full-precision amount to cents for display."""
    return value.quantize(CENT, ROUND_HALF_UP)


def to_decimal(value: object, field_name: str = "value") -> Decimal:
    """Convert a row value (int, float, str, Decimal) to Decimal."""
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise InvalidEntryError(f"{field_name} is missing or not numeric: {value!r}")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidEntryError(f"{field_name} is not numeric: {value!r}") from None


class EntrySource(Enum):
    MANUAL = "manual"
    IMPORTED = "imported"


class SlotStatus(Enum):
    MATCH = "match"
    DISCREPANCY = "discrepancy"
    MISSING_MANUAL = "missing_manual"
    MISSING_WEBHOOK = "missing_webhook"


class Period(Enum):
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


# --- Work entries -----------------------------------------------------------


@dataclass(frozen=True)
class WorkEntry:
    """One recorded stretch of work, common to both entry sources."""

    source: ClassVar[EntrySource]

    id: str
    technician_id: str
    date: date
    hours_worked: Decimal
    customer_id: str | None = None
    description: str = ""
    start_time: str | None = None
    end_time: str | None = None
    technician_name: str | None = None

    @property
    def is_manual(self) -> bool:
        return self.source is EntrySource.MANUAL

    @property
    def display_name(self) -> str:
        return self.technician_name or self.technician_id


@dataclass(frozen=True)
class ManualEntry(WorkEntry):
    """Entered by a technician or admin through the application."""

    source: ClassVar[EntrySource] = EntrySource.MANUAL

    # Stamped by the entry form when a travel agreement was active
    travel_expense_to_technician: Decimal = ZERO
    travel_expense_from_client: Decimal = ZERO


@dataclass(frozen=True)
class ImportedEntry(WorkEntry):
    """Arrived from the external time-capture integration (webhook)."""

    source: ClassVar[EntrySource] = EntrySource.IMPORTED

    verified: bool = False
    received_at: str | None = None


@dataclass(frozen=True)
class ClassifiedHours:
    """Bucket split of one entry's hours."""
    regular_hours: Decimal
    overtime_hours: Decimal
    weekend_hours: Decimal
    sunday_hours: Decimal
    is_weekend: bool
    is_sunday: bool

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours + self.weekend_hours + self.sunday_hours


@dataclass(frozen=True)
class ClassifiedEntry:
    entry: WorkEntry
    hours: ClassifiedHours

    @property
    def technician_id(self) -> str:
        return self.entry.technician_id

    @property
    def date(self) -> date:
        return self.entry.date

    @property
    def customer_id(self) -> str | None:
        return self.entry.customer_id

    @property
    def is_manual(self) -> bool:
        return self.entry.is_manual

    @property
    def travel_key(self) -> tuple[str, date, str | None]:
        return (self.entry.technician_id, self.entry.date, self.entry.customer_id)


# --- Rates ------------------------------------------------------------------


@dataclass(frozen=True)
class RateAgreement:
    """Technician-level pay/bill configuration."""
    technician_id: str
    hourly_rate: Decimal
    billable_rate: Decimal
    saturday_rate: Decimal | None = None
    sunday_rate: Decimal | None = None

    def __post_init__(self) -> None:
        for name in ("hourly_rate", "billable_rate", "saturday_rate", "sunday_rate"):
            val = getattr(self, name)
            if val is None:
                continue
            if not val.is_finite():
                raise ValueError(f"Rate '{name}' must be a finite amount, got {val}")
            if val < 0:
                raise ValueError(f"Rate '{name}' must not be negative, got {val}")


@dataclass(frozen=True)
class ResolvedRates:
    hourly: Decimal
    billable: Decimal
    saturday: Decimal
    sunday: Decimal


@dataclass(frozen=True)
class TravelAgreement:
    """Daily travel amounts for one (customer, technician) pair."""
    customer_id: str
    technician_id: str
    to_technician: Decimal
    from_client: Decimal


@dataclass(frozen=True)
class TravelCharge:
    to_technician: Decimal = ZERO
    from_client: Decimal = ZERO


NO_TRAVEL = TravelCharge()


@dataclass(frozen=True)
class PricedEntry:
    """Cost and revenue of one classified entry."""
    classified: ClassifiedEntry
    labour_cost: Decimal
    labour_revenue: Decimal
    travel_cost: Decimal = ZERO
    travel_revenue: Decimal = ZERO

    @property
    def cost(self) -> Decimal:
        return self.labour_cost + self.travel_cost

    @property
    def revenue(self) -> Decimal:
        return self.labour_revenue + self.travel_revenue

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.cost


# --- Reconciliation ---------------------------------------------------------


@dataclass
class ReconciliationSlot:
    """Manual and imported records of one (technician, date[, customer])."""
    technician_id: str
    date: date
    customer_id: str | None = None
    technician_name: str | None = None
    manual_entries: list[ManualEntry] = field(default_factory=list)
    imported_entries: list[ImportedEntry] = field(default_factory=list)
    verified: bool = False

    @property
    def key(self) -> tuple[str, date, str | None]:
        return (self.technician_id, self.date, self.customer_id)

    @property
    def manual_hours(self) -> Decimal:
        return sum((e.hours_worked for e in self.manual_entries), ZERO)

    @property
    def imported_hours(self) -> Decimal:
        return sum((e.hours_worked for e in self.imported_entries), ZERO)

    @property
    def difference(self) -> Decimal:
        return self.imported_hours - self.manual_hours

    @property
    def manual_ids(self) -> list[str]:
        return [e.id for e in self.manual_entries]

    @property
    def imported_ids(self) -> list[str]:
        return [e.id for e in self.imported_entries]

    @property
    def has_imported(self) -> bool:
        return bool(self.imported_entries)

    @property
    def status(self) -> SlotStatus:
        manual, imported = self.manual_hours, self.imported_hours
        if manual == imported:
            return SlotStatus.MATCH
        if manual == 0:
            return SlotStatus.MISSING_MANUAL
        if imported == 0:
            return SlotStatus.MISSING_WEBHOOK
        return SlotStatus.DISCREPANCY

    @property
    def authoritative_entries(self) -> list[WorkEntry]:
        # Manual always wins; imported hours only stand in when nothing was entered
        if self.manual_entries:
            return list(self.manual_entries)
        return list(self.imported_entries)

    @property
    def authoritative_hours(self) -> Decimal:
        return sum((e.hours_worked for e in self.authoritative_entries), ZERO)

    @property
    def display_name(self) -> str:
        return self.technician_name or self.technician_id


# --- Aggregates -------------------------------------------------------------


@dataclass
class TechnicianPeriodSummary:
    """Per-technician totals over a period. Derived, never persisted."""
    technician_id: str
    technician_name: str
    total_hours: Decimal = ZERO
    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    weekend_hours: Decimal = ZERO
    sunday_hours: Decimal = ZERO
    days_worked: int = 0
    last_worked: date | None = None
    total_revenue: Decimal = ZERO
    total_cost: Decimal = ZERO
    travel_revenue: Decimal = ZERO
    travel_cost: Decimal = ZERO

    @property
    def total_profit(self) -> Decimal:
        return self.total_revenue - self.total_cost

    @property
    def margin(self) -> Decimal:
        if self.total_revenue == 0:
            return ZERO
        return self.total_profit / self.total_revenue


@dataclass
class PeriodRollup:
    """Hours bucketed by week start or month start."""
    period_start: date
    all_hours: Decimal = ZERO
    regular_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    weekend_hours: Decimal = ZERO
    sunday_hours: Decimal = ZERO


@dataclass
class PassReport:
    """Everything one reconciliation/billing pass produced."""
    as_of: date
    period: Period
    period_start: date | None
    period_end: date | None
    slots: list[ReconciliationSlot]
    priced_entries: list[PricedEntry]
    summaries: list[TechnicianPeriodSummary]
    weekly: list[PeriodRollup]
    monthly: list[PeriodRollup]
    skipped: list[str] = field(default_factory=list)
    write_errors: list[str] = field(default_factory=list)

    @property
    def total_revenue(self) -> Decimal:
        return sum((s.total_revenue for s in self.summaries), ZERO)

    @property
    def total_cost(self) -> Decimal:
        return sum((s.total_cost for s in self.summaries), ZERO)

    @property
    def total_profit(self) -> Decimal:
        return self.total_revenue - self.total_cost

    @property
    def total_hours(self) -> Decimal:
        return sum((s.total_hours for s in self.summaries), ZERO)


@dataclass
class PassResult:
    success: bool
    report: PassReport | None = None
    error_type: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass
class AgreeResult:
    success: bool
    slot: ReconciliationSlot | None = None
    error_type: str | None = None
    errors: list[str] = field(default_factory=list)


# --- Errors -----------------------------------------------------------------


class StrictValidationError(Exception):
    """Raised when strict validation fails."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Strict validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))


class InvalidEntryError(ValueError):
    """A single entry cannot be classified (bad hours or date)."""


class StoreUnavailableError(Exception):
    """The external store could not deliver the source collections."""


class VerifyWriteError(Exception):
    """Marking imported records verified failed in the store."""
