"""Entry Validation Engine.

Checks converted entries before reconciliation. Invalid entries are
skipped and reported so one bad row does not block a whole pass; in
strict mode any problem stops processing.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import TypeVar

from hours_tool.engine.classifier import MAX_HOURS_PER_ENTRY
from hours_tool.models import StrictValidationError, WorkEntry

E = TypeVar("E", bound=WorkEntry)


def validate_entries(
    entries: Sequence[E],
    strict: bool = False,
) -> tuple[list[E], list[str]]:
    """Validate one stream of entries.

    Returns the entries that passed and a message per problem found.
    """
    errors: list[str] = []
    valid: list[E] = []
    seen_ids: set[str] = set()

    # --- Per-entry validation ---
    for entry in entries:
        label = f"{entry.source.value} entry {entry.id} ({entry.technician_id} on {entry.date})"
        hours = entry.hours_worked

        if not hours.is_finite():
            errors.append(f"{label}: hours_worked is not finite")
            continue
        if hours <= 0:
            errors.append(f"{label}: hours_worked={hours} must be positive")
            continue
        if hours > MAX_HOURS_PER_ENTRY:
            errors.append(f"{label}: hours_worked={hours} > {MAX_HOURS_PER_ENTRY}")
            continue
        if entry.id in seen_ids:
            errors.append(f"{label}: duplicate record id")
            continue

        seen_ids.add(entry.id)
        valid.append(entry)

    # --- Per-technician-per-date aggregation (manual stream only) ---
    daily_totals: dict[tuple[str, date], Decimal] = defaultdict(Decimal)
    for entry in valid:
        if entry.is_manual:
            daily_totals[(entry.technician_id, entry.date)] += entry.hours_worked

    for (tech_id, day), total in daily_totals.items():
        if total > MAX_HOURS_PER_ENTRY:
            errors.append(
                f"{tech_id} on {day}: aggregated manual daily total={total} > {MAX_HOURS_PER_ENTRY}"
            )

    if strict and errors:
        raise StrictValidationError(errors)

    return valid, errors
