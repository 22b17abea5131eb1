"""Work-hours spreadsheet import (.xlsx or .csv).

Required columns: Technician, Date, Hours. Optional: Description, Customer,
Start, End. Header matching is case-insensitive; when Hours is empty but
Start and End are filled, the hours are computed from the times.
"""

from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

import openpyxl

from hours_tool.models import EntrySource, InvalidEntryError, WorkEntry
from hours_tool.parsers.rows import convert_rows, entry_from_row

logger = logging.getLogger(__name__)

_COLUMN_NAMES = {
    "technician": "technician_id",
    "technician name": "technician_id",
    "technician_id": "technician_id",
    "date": "date",
    "hours": "hours_worked",
    "hours worked": "hours_worked",
    "hours_worked": "hours_worked",
    "description": "description",
    "customer": "customer_id",
    "customer_id": "customer_id",
    "start": "start_time",
    "start time": "start_time",
    "end": "end_time",
    "end time": "end_time",
}

_REQUIRED = ("technician_id", "date")


def _parse_date_flexible(value: Any) -> date:
    """Parse dates in multiple formats."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    date_str = str(value).strip()

    formats = [
        "%Y-%m-%d",      # 2024-06-15
        "%d-%m-%Y",      # 15-06-2024
        "%d/%m/%Y",      # 15/06/2024
        "%d.%m.%Y",      # 15.06.2024
        "%d-%b-%y",      # 15-Jun-24
        "%d-%b-%Y",      # 15-Jun-2024
    ]

    for fmt in formats:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    raise InvalidEntryError(f"Cannot parse date: '{date_str}'")


def _calc_hours_from_times(from_time: str, to_time: str) -> Decimal:
    """Calculate hours between two HH:MM time strings."""
    try:
        from_parts = str(from_time).split(":")
        to_parts = str(to_time).split(":")
        from_mins = int(from_parts[0]) * 60 + int(from_parts[1])
        to_mins = int(to_parts[0]) * 60 + int(to_parts[1])
    except (ValueError, IndexError):
        raise InvalidEntryError(f"Cannot compute hours from '{from_time}'-'{to_time}'") from None
    diff = to_mins - from_mins
    if diff < 0:
        diff += 24 * 60  # crossed midnight
    return Decimal(diff) / Decimal(60)


def _time_text(value: Any) -> str | None:
    if value is None or str(value).strip() == "":
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M")
    return str(value).strip()


def _read_xlsx(path: Path) -> list[list[Any]]:
    wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    try:
        ws = wb.active
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_csv(path: Path) -> list[list[Any]]:
    with path.open(newline="", encoding="utf-8-sig") as f:
        sample = f.read(2048)
        f.seek(0)
        try:
            dialect = csv.Sniffer().sniff(sample, delimiters=",;\t")
        except csv.Error:
            dialect = csv.excel
        return [row for row in csv.reader(f, dialect)]


def _header_map(header: list[Any]) -> dict[int, str]:
    mapping: dict[int, str] = {}
    for idx, cell in enumerate(header):
        if cell is None:
            continue
        name = _COLUMN_NAMES.get(str(cell).strip().lower())
        if name:
            mapping[idx] = name
    missing = [c for c in _REQUIRED if c not in mapping.values()]
    if missing:
        raise InvalidEntryError(f"Missing required column(s): {', '.join(missing)}")
    return mapping


def _row_to_record(
    values: list[Any],
    columns: dict[int, str],
    record_id: str,
    source: EntrySource,
) -> dict[str, Any]:
    record: dict[str, Any] = {"id": record_id, "source": source.value}
    for idx, name in columns.items():
        record[name] = values[idx] if idx < len(values) else None

    record["date"] = _parse_date_flexible(record.get("date")).isoformat()
    record["start_time"] = _time_text(record.get("start_time"))
    record["end_time"] = _time_text(record.get("end_time"))

    hours = record.get("hours_worked")
    if hours is None or str(hours).strip() == "":
        if record["start_time"] and record["end_time"]:
            record["hours_worked"] = _calc_hours_from_times(record["start_time"], record["end_time"])
        else:
            raise InvalidEntryError("Hours missing and no start/end time to compute them from")
    elif isinstance(hours, str):
        # Dutch exports use a decimal comma
        record["hours_worked"] = hours.strip().replace(",", ".")
    return record


def parse_hours_file(
    path: str | Path,
    source: EntrySource = EntrySource.MANUAL,
) -> tuple[list[WorkEntry], list[str]]:
    """Read a spreadsheet of work hours into entries.

    Returns the entries and one message per row that could not be read.
    Raises InvalidEntryError when the file has no usable header.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        rows = _read_xlsx(path)
    elif suffix == ".csv":
        rows = _read_csv(path)
    else:
        raise InvalidEntryError(f"Unsupported file type: {path.name} (expected .xlsx or .csv)")

    # Line numbers refer to the file as the user sees it, blank lines included
    numbered = [
        (line_no, r) for line_no, r in enumerate(rows, start=1)
        if any(c is not None and str(c).strip() for c in r)
    ]
    if not numbered:
        raise InvalidEntryError(f"No rows found in {path.name}")

    columns = _header_map(numbered[0][1])
    records: list[dict[str, Any]] = []
    errors: list[str] = []

    for line_no, values in numbered[1:]:
        record_id = f"{path.stem}-{line_no}"
        try:
            records.append(_row_to_record(values, columns, record_id, source))
        except InvalidEntryError as e:
            errors.append(f"{path.name} line {line_no}: {e}")

    entries, conversion_errors = convert_rows(records, entry_from_row, path.name)
    errors.extend(conversion_errors)
    logger.info("Read %d entries from %s (%d rejected)", len(entries), path.name, len(errors))
    return entries, errors
