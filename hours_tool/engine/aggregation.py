"""Roll priced, reconciled entries up per technician and per period."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, timedelta

from hours_tool.engine.pricing import price_entries
from hours_tool.engine.rates import RateBook
from hours_tool.models import (
    ClassifiedEntry,
    Period,
    PeriodRollup,
    PricedEntry,
    TechnicianPeriodSummary,
)


def week_start_of(day: date, week_start: int = 0) -> date:
    """First day of the week containing ``day`` (Monday=0 ... Sunday=6)."""
    offset = (day.weekday() - week_start) % 7
    return day - timedelta(days=offset)


def period_bounds(
    as_of: date,
    period: Period,
    week_start: int = 0,
) -> tuple[date | None, date | None]:
    """Inclusive date range of the week or month containing ``as_of``."""
    if period is Period.WEEK:
        start = week_start_of(as_of, week_start)
        return start, start + timedelta(days=6)
    if period is Period.MONTH:
        last_day = calendar.monthrange(as_of.year, as_of.month)[1]
        return as_of.replace(day=1), as_of.replace(day=last_day)
    return None, None


def in_period(day: date, start: date | None, end: date | None) -> bool:
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def summarize_priced(priced_entries: Iterable[PricedEntry]) -> list[TechnicianPeriodSummary]:
    """Per-technician totals, most profitable first."""
    summaries: dict[str, TechnicianPeriodSummary] = {}
    dates: dict[str, set[date]] = {}

    for priced in priced_entries:
        classified = priced.classified
        tech_id = classified.technician_id
        summary = summaries.get(tech_id)
        if summary is None:
            summary = TechnicianPeriodSummary(
                technician_id=tech_id,
                technician_name=classified.entry.display_name,
            )
            summaries[tech_id] = summary
            dates[tech_id] = set()

        h = classified.hours
        summary.total_hours += h.total_hours
        summary.regular_hours += h.regular_hours
        summary.overtime_hours += h.overtime_hours
        summary.weekend_hours += h.weekend_hours
        summary.sunday_hours += h.sunday_hours
        summary.total_revenue += priced.revenue
        summary.total_cost += priced.cost
        summary.travel_revenue += priced.travel_revenue
        summary.travel_cost += priced.travel_cost

        if h.total_hours > 0:
            dates[tech_id].add(classified.date)
        if summary.last_worked is None or classified.date > summary.last_worked:
            summary.last_worked = classified.date

    for tech_id, summary in summaries.items():
        summary.days_worked = len(dates[tech_id])

    # sorted() is stable, equal profits keep first-seen order
    return sorted(summaries.values(), key=lambda s: s.total_profit, reverse=True)


def summarize(
    classified_entries: Iterable[ClassifiedEntry],
    book: RateBook,
) -> list[TechnicianPeriodSummary]:
    """Price authoritative entries and roll them up per technician."""
    return summarize_priced(price_entries(classified_entries, book))


def _rollup(
    classified_entries: Iterable[ClassifiedEntry],
    bucket_of,
) -> list[PeriodRollup]:
    rollups: dict[date, PeriodRollup] = {}
    for classified in classified_entries:
        start = bucket_of(classified.date)
        rollup = rollups.get(start)
        if rollup is None:
            rollup = PeriodRollup(period_start=start)
            rollups[start] = rollup
        h = classified.hours
        rollup.all_hours += h.total_hours
        rollup.regular_hours += h.regular_hours
        rollup.overtime_hours += h.overtime_hours
        rollup.weekend_hours += h.weekend_hours
        rollup.sunday_hours += h.sunday_hours
    return [rollups[k] for k in sorted(rollups)]


def weekly_rollup(
    classified_entries: Iterable[ClassifiedEntry],
    week_start: int = 0,
) -> list[PeriodRollup]:
    return _rollup(classified_entries, lambda d: week_start_of(d, week_start))


def monthly_rollup(classified_entries: Iterable[ClassifiedEntry]) -> list[PeriodRollup]:
    return _rollup(classified_entries, lambda d: d.replace(day=1))
