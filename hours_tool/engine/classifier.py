"""Calendar-based hour classification.

Business Rules:
- Sunday: all hours are Sunday hours (paid at the Sunday rate, billed at 200%)
- Saturday: all hours are weekend hours (Saturday rate, billed at 150%)
- Monday through Friday:
  - First 8 hours = Regular
  - Remaining hours = Overtime (125%)

A day is a weekday, a Saturday or a Sunday, never a mix within one entry.
Only the civil date matters; start/end times are informational.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from hours_tool.models import (
    ZERO,
    ClassifiedEntry,
    ClassifiedHours,
    InvalidEntryError,
    WorkEntry,
    to_decimal,
)

logger = logging.getLogger(__name__)

REGULAR_HOURS_PER_DAY = Decimal("8")
MAX_HOURS_PER_ENTRY = Decimal("24")


def classify_hours(day: date, hours_worked: Decimal) -> ClassifiedHours:
    """Split hours into regular/overtime/weekend/Sunday buckets by weekday.

    Pure function: no validation or clamping, callers check the range.
    """
    hours = to_decimal(hours_worked, "hours_worked")
    day_of_week = day.weekday()  # Monday=0, Sunday=6

    if day_of_week == 6:
        return ClassifiedHours(
            regular_hours=ZERO,
            overtime_hours=ZERO,
            weekend_hours=ZERO,
            sunday_hours=hours,
            is_weekend=False,
            is_sunday=True,
        )
    if day_of_week == 5:
        return ClassifiedHours(
            regular_hours=ZERO,
            overtime_hours=ZERO,
            weekend_hours=hours,
            sunday_hours=ZERO,
            is_weekend=True,
            is_sunday=False,
        )

    regular = min(hours, REGULAR_HOURS_PER_DAY)
    overtime = max(hours - REGULAR_HOURS_PER_DAY, ZERO)
    return ClassifiedHours(
        regular_hours=regular,
        overtime_hours=overtime,
        weekend_hours=ZERO,
        sunday_hours=ZERO,
        is_weekend=False,
        is_sunday=False,
    )


def check_hours(hours: Decimal) -> None:
    """Raise InvalidEntryError unless 0 < hours <= 24."""
    if not hours.is_finite():
        raise InvalidEntryError(f"hours_worked is not finite: {hours}")
    if hours <= 0 or hours > MAX_HOURS_PER_ENTRY:
        raise InvalidEntryError(f"hours_worked={hours} outside (0, {MAX_HOURS_PER_ENTRY}]")


def classify_entry(entry: WorkEntry) -> ClassifiedEntry:
    """Validate and classify a single entry."""
    try:
        check_hours(entry.hours_worked)
    except InvalidEntryError as e:
        raise InvalidEntryError(
            f"{entry.source.value} entry {entry.id} ({entry.technician_id} on {entry.date}): {e}"
        ) from None
    return ClassifiedEntry(entry=entry, hours=classify_hours(entry.date, entry.hours_worked))


def classify_entries(entries: Iterable[WorkEntry]) -> tuple[list[ClassifiedEntry], list[str]]:
    """Classify a batch, skipping entries that fail and reporting why."""
    classified: list[ClassifiedEntry] = []
    errors: list[str] = []
    for entry in entries:
        try:
            classified.append(classify_entry(entry))
        except InvalidEntryError as e:
            logger.debug("Skipping unclassifiable entry: %s", e)
            errors.append(str(e))
    return classified, errors
