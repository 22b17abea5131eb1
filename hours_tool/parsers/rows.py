"""Store row conversion.

Rows arrive as loosely-typed dicts (snake_case as stored, camelCase as sent
by the front-end). Each source has exactly one conversion function into
its typed record; nothing downstream looks at raw rows again.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any, TypeVar

from hours_tool.models import (
    ZERO,
    EntrySource,
    ImportedEntry,
    InvalidEntryError,
    ManualEntry,
    RateAgreement,
    TravelAgreement,
    WorkEntry,
    to_decimal,
)

T = TypeVar("T")

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# Field names used by the import webhook and older front-end versions
_ALIASES = {
    "hours": "hours_worked",
    "travel_to_technician": "travel_expense_to_technician",
    "travel_from_client": "travel_expense_from_client",
    "to_technician": "travel_expense_to_technician",
    "from_client": "travel_expense_from_client",
}

_SOURCE_ALIASES = {
    "manual": EntrySource.MANUAL,
    "imported": EntrySource.IMPORTED,
    "webhook": EntrySource.IMPORTED,
}


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``row`` with snake_case keys."""
    result: dict[str, Any] = {}
    for key, value in row.items():
        snake = _CAMEL_RE.sub("_", key).lower()
        result[_ALIASES.get(snake, snake)] = value
    return result


def parse_iso_date(value: Any) -> date:
    """Parse an ISO 8601 date; a time part, if any, is ignored."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidEntryError(f"date is missing or not a string: {value!r}")
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise InvalidEntryError(f"Cannot parse date: '{text}'") from None


def _required_str(row: Mapping[str, Any], name: str) -> str:
    value = row.get(name)
    if value is None or not str(value).strip():
        raise InvalidEntryError(f"{name} is required")
    return str(value).strip()


def _optional_str(row: Mapping[str, Any], name: str) -> str | None:
    value = row.get(name)
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


def _optional_decimal(row: Mapping[str, Any], name: str) -> Decimal | None:
    value = row.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    amount = to_decimal(value, name)
    if not amount.is_finite():
        raise InvalidEntryError(f"{name} is not a finite amount: {value!r}")
    return amount


def _common_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": _required_str(row, "id"),
        "technician_id": _required_str(row, "technician_id"),
        "date": parse_iso_date(row.get("date")),
        "hours_worked": to_decimal(row.get("hours_worked"), "hours_worked"),
        "customer_id": _optional_str(row, "customer_id"),
        "description": str(row.get("description") or ""),
        "start_time": _optional_str(row, "start_time"),
        "end_time": _optional_str(row, "end_time"),
        "technician_name": _optional_str(row, "technician_name"),
    }


def manual_entry_from_row(row: Mapping[str, Any]) -> ManualEntry:
    row = normalize_row(row)
    return ManualEntry(
        **_common_fields(row),
        travel_expense_to_technician=_optional_decimal(row, "travel_expense_to_technician") or ZERO,
        travel_expense_from_client=_optional_decimal(row, "travel_expense_from_client") or ZERO,
    )


def imported_entry_from_row(row: Mapping[str, Any]) -> ImportedEntry:
    row = normalize_row(row)
    return ImportedEntry(
        **_common_fields(row),
        verified=bool(row.get("verified", False)),
        received_at=_optional_str(row, "received_at"),
    )


def source_of(row: Mapping[str, Any]) -> EntrySource:
    """Which stream a mixed row belongs to (``source`` or ``is_manual_entry``)."""
    row = normalize_row(row)
    raw = row.get("source")
    if raw is not None:
        source = _SOURCE_ALIASES.get(str(raw).strip().lower())
        if source is None:
            raise InvalidEntryError(f"Unknown entry source: {raw!r}")
        return source
    if "is_manual_entry" in row:
        return EntrySource.MANUAL if row["is_manual_entry"] else EntrySource.IMPORTED
    return EntrySource.MANUAL


def entry_from_row(row: Mapping[str, Any]) -> WorkEntry:
    if source_of(row) is EntrySource.IMPORTED:
        return imported_entry_from_row(row)
    return manual_entry_from_row(row)


def rate_agreement_from_row(row: Mapping[str, Any]) -> RateAgreement:
    row = normalize_row(row)
    try:
        return RateAgreement(
            technician_id=_required_str(row, "technician_id"),
            hourly_rate=_optional_decimal(row, "hourly_rate") or ZERO,
            billable_rate=_optional_decimal(row, "billable_rate") or ZERO,
            saturday_rate=_optional_decimal(row, "saturday_rate"),
            sunday_rate=_optional_decimal(row, "sunday_rate"),
        )
    except ValueError as e:
        raise InvalidEntryError(str(e)) from None


def travel_agreement_from_row(row: Mapping[str, Any]) -> TravelAgreement:
    row = normalize_row(row)
    return TravelAgreement(
        customer_id=_required_str(row, "customer_id"),
        technician_id=_required_str(row, "technician_id"),
        to_technician=_optional_decimal(row, "travel_expense_to_technician") or ZERO,
        from_client=_optional_decimal(row, "travel_expense_from_client") or ZERO,
    )


def convert_rows(
    rows: Iterable[Mapping[str, Any]],
    converter: Callable[[Mapping[str, Any]], T],
    kind: str,
) -> tuple[list[T], list[str]]:
    """Convert rows, skipping the ones that fail and reporting why."""
    converted: list[T] = []
    errors: list[str] = []
    for index, row in enumerate(rows):
        try:
            converted.append(converter(row))
        except InvalidEntryError as e:
            ref = row.get("id", f"#{index}")
            errors.append(f"{kind} row {ref}: {e}")
    return converted, errors


def entry_to_row(entry: WorkEntry) -> dict[str, Any]:
    """Serialise an entry back to the store row shape."""
    row: dict[str, Any] = {
        "id": entry.id,
        "technician_id": entry.technician_id,
        "customer_id": entry.customer_id,
        "date": entry.date.isoformat(),
        "hours_worked": float(entry.hours_worked),
        "source": entry.source.value,
        "description": entry.description,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
    }
    if entry.technician_name:
        row["technician_name"] = entry.technician_name
    if isinstance(entry, ManualEntry):
        row["travel_expense_to_technician"] = float(entry.travel_expense_to_technician)
        row["travel_expense_from_client"] = float(entry.travel_expense_from_client)
    if isinstance(entry, ImportedEntry):
        row["verified"] = entry.verified
        row["received_at"] = entry.received_at
    return row
