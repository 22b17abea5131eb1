"""Row conversion and spreadsheet import layer."""
from hours_tool.parsers.hours_sheet import parse_hours_file
from hours_tool.parsers.rows import (
    convert_rows,
    entry_from_row,
    entry_to_row,
    imported_entry_from_row,
    manual_entry_from_row,
    rate_agreement_from_row,
    travel_agreement_from_row,
)

__all__ = [
    "convert_rows",
    "entry_from_row",
    "entry_to_row",
    "imported_entry_from_row",
    "manual_entry_from_row",
    "parse_hours_file",
    "rate_agreement_from_row",
    "travel_agreement_from_row",
]
