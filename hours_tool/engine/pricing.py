"""Financial Calculation Engine.

All monetary calculations are done with full Decimal precision; rounding
to cents happens only when values are displayed or exported.

Cost side (manual entries only, imported time is not payroll-eligible):
    regular x hourly + overtime x hourly x 1.25
    + weekend x Saturday rate + Sunday x Sunday rate
    + travel paid to the technician

Revenue side (every entry, billing follows the work performed):
    regular x billable + overtime x billable x 1.25
    + weekend x billable x 1.5 + Sunday x billable x 2
    + travel billed to the client

Travel is attributed once per (technician, date, customer), never per entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from hours_tool.engine.rates import RateBook
from hours_tool.models import (
    NO_TRAVEL,
    ZERO,
    ClassifiedEntry,
    ManualEntry,
    PricedEntry,
    ResolvedRates,
    TravelCharge,
)

OVERTIME_MULTIPLIER = Decimal("1.25")
SATURDAY_MULTIPLIER = Decimal("1.5")
SUNDAY_MULTIPLIER = Decimal("2")


def labour_revenue(classified: ClassifiedEntry, rates: ResolvedRates) -> Decimal:
    h = classified.hours
    return (
        h.regular_hours * rates.billable
        + h.overtime_hours * rates.billable * OVERTIME_MULTIPLIER
        + h.weekend_hours * rates.billable * SATURDAY_MULTIPLIER
        + h.sunday_hours * rates.billable * SUNDAY_MULTIPLIER
    )


def labour_cost(classified: ClassifiedEntry, rates: ResolvedRates) -> Decimal:
    if not classified.is_manual:
        return ZERO
    h = classified.hours
    return (
        h.regular_hours * rates.hourly
        + h.overtime_hours * rates.hourly * OVERTIME_MULTIPLIER
        + h.weekend_hours * rates.saturday
        + h.sunday_hours * rates.sunday
    )


def price_entry(
    classified: ClassifiedEntry,
    rates: ResolvedRates,
    travel: TravelCharge | None = None,
) -> PricedEntry:
    """Price one classified entry.

    ``travel`` is added as-is; callers pricing a collection use
    :func:`price_entries`, which passes it only for the first entry of each
    (technician, date, customer) triple.
    """
    travel = travel or NO_TRAVEL
    return PricedEntry(
        classified=classified,
        labour_cost=labour_cost(classified, rates),
        labour_revenue=labour_revenue(classified, rates),
        travel_cost=travel.to_technician if classified.is_manual else ZERO,
        travel_revenue=travel.from_client,
    )


def travel_for(classified: ClassifiedEntry, book: RateBook) -> TravelCharge:
    """Travel amounts applicable to an entry's technician/customer pair.

    The agreement table is the source of truth; amounts stamped on a manual
    entry by the entry form are used only when no agreement exists.
    """
    if classified.customer_id is None:
        return NO_TRAVEL
    if book.travel_agreement(classified.customer_id, classified.technician_id) is not None:
        return book.resolve_travel(classified.customer_id, classified.technician_id)
    entry = classified.entry
    if isinstance(entry, ManualEntry) and (
        entry.travel_expense_to_technician or entry.travel_expense_from_client
    ):
        return TravelCharge(
            to_technician=entry.travel_expense_to_technician,
            from_client=entry.travel_expense_from_client,
        )
    return NO_TRAVEL


def price_entries(
    classified_entries: Iterable[ClassifiedEntry],
    book: RateBook,
) -> list[PricedEntry]:
    """Price a collection, deduplicating travel per (technician, date, customer)."""
    revenue_seen: set[tuple[str, date, str | None]] = set()
    cost_seen: set[tuple[str, date, str | None]] = set()
    priced: list[PricedEntry] = []

    for classified in classified_entries:
        rates = book.resolve_rates(classified.technician_id)
        travel = travel_for(classified, book)
        key = classified.travel_key

        from_client = ZERO
        to_technician = ZERO
        if travel is not NO_TRAVEL:
            if key not in revenue_seen:
                revenue_seen.add(key)
                from_client = travel.from_client
            if classified.is_manual and key not in cost_seen:
                cost_seen.add(key)
                to_technician = travel.to_technician

        priced.append(price_entry(
            classified,
            rates,
            TravelCharge(to_technician=to_technician, from_client=from_client),
        ))

    return priced
