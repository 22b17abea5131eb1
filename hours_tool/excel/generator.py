"""Excel Report Generator.

Writes a fresh workbook with one sheet per view of a pass:
Summary, Technician Details, Work Hours, Manual vs Imported, Weekly.
Excel formulas are NOT relied upon; all values are pre-computed in Python.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from hours_tool.config import Settings
from hours_tool.engine.reconciliation import slot_counts
from hours_tool.models import PassReport, SlotStatus, round_money

# Formatting constants
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)

HEADER_FONT = Font(name='Calibri', size=11, bold=True)
DATA_FONT = Font(name='Calibri', size=11)
TITLE_FONT = Font(name='Calibri', size=12, bold=True)
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
HEADER_FILL = PatternFill(start_color='D9E1F2', end_color='D9E1F2', fill_type='solid')
NUMBER_FORMAT = '#,##0.00'
PERCENT_FORMAT = '0.0%'
DATE_FORMAT = 'dd-mm-yyyy'

STATUS_FILLS = {
    SlotStatus.MATCH: PatternFill(start_color='E2EFDA', end_color='E2EFDA', fill_type='solid'),
    SlotStatus.DISCREPANCY: PatternFill(start_color='FCE4D6', end_color='FCE4D6', fill_type='solid'),
    SlotStatus.MISSING_MANUAL: PatternFill(start_color='FFF2CC', end_color='FFF2CC', fill_type='solid'),
    SlotStatus.MISSING_WEBHOOK: PatternFill(start_color='FFF2CC', end_color='FFF2CC', fill_type='solid'),
}


def _money_format(currency: str) -> str:
    return f'"{currency}" #,##0.00'


def _write_cell(ws, row: int, col: int, value, *, number_format: str | None = None, bold: bool = False):
    if isinstance(value, Decimal):
        value = float(value)
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
        number_format = number_format or DATE_FORMAT
    cell = ws.cell(row=row, column=col)
    cell.value = value
    cell.font = HEADER_FONT if bold else DATA_FONT
    cell.border = THIN_BORDER
    cell.alignment = CENTER_ALIGN
    if number_format:
        cell.number_format = number_format
    return cell


def _write_header(ws, row: int, labels: list[str]) -> None:
    for col, label in enumerate(labels, start=1):
        cell = ws.cell(row=row, column=col)
        cell.value = label
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = THIN_BORDER
        cell.alignment = CENTER_ALIGN


def _write_title(ws, title: str, width: int) -> None:
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=max(width, 1))
    cell = ws.cell(row=1, column=1)
    cell.value = title
    cell.font = TITLE_FONT
    cell.alignment = CENTER_ALIGN


def _set_widths(ws, widths: list[int]) -> None:
    for col, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width


def generate_excel_report(
    report: PassReport,
    output_path: str | Path,
    settings: Settings | None = None,
) -> Path:
    """Generate the Excel hours and billing report from a computed pass."""
    settings = settings or Settings()
    output_path = Path(output_path)
    money = _money_format(settings.currency)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = 'Summary'
    _write_summary_sheet(ws, report, settings, money)
    _write_technician_sheet(wb.create_sheet('Technician Details'), report, money)
    _write_work_hours_sheet(wb.create_sheet('Work Hours'), report, money)
    _write_reconciliation_sheet(wb.create_sheet('Manual vs Imported'), report)
    _write_weekly_sheet(wb.create_sheet('Weekly'), report)

    wb.save(str(output_path))
    return output_path


def _write_summary_sheet(ws, report: PassReport, settings: Settings, money: str) -> None:
    _write_title(ws, 'Hours and Billing Summary', 2)

    if report.period_start and report.period_end:
        period_label = (
            f"{settings.format_date(report.period_start)} - {settings.format_date(report.period_end)}"
        )
    else:
        period_label = 'All time'

    counts = slot_counts(report.slots)
    rows = [
        ('As of', settings.format_date(report.as_of), None),
        ('Period', period_label, None),
        ('Technicians', len(report.summaries), None),
        ('Total Hours', report.total_hours, NUMBER_FORMAT),
        ('Total Revenue', round_money(report.total_revenue), money),
        ('Total Cost', round_money(report.total_cost), money),
        ('Total Profit', round_money(report.total_profit), money),
        ('Matching Days', counts['match'], None),
        ('Discrepancies', counts['discrepancy'], None),
        ('Missing Records', counts['missing'], None),
        ('Verified Days', counts['verified'], None),
        ('Skipped Records', len(report.skipped), None),
    ]
    for offset, (label, value, fmt) in enumerate(rows):
        row = 3 + offset
        _write_cell(ws, row, 1, label, bold=True)
        _write_cell(ws, row, 2, value, number_format=fmt)

    _set_widths(ws, [24, 28])


def _write_technician_sheet(ws, report: PassReport, money: str) -> None:
    labels = [
        'Technician', 'Total Hours', 'Regular', 'Overtime', 'Saturday', 'Sunday',
        'Days Worked', 'Last Worked', 'Revenue', 'Cost', 'Profit', 'Margin',
        'Travel Revenue', 'Travel Cost',
    ]
    _write_title(ws, 'Technician Details', len(labels))
    _write_header(ws, 2, labels)

    row = 3
    for s in report.summaries:
        values = [
            (s.technician_name, None),
            (s.total_hours, NUMBER_FORMAT),
            (s.regular_hours, NUMBER_FORMAT),
            (s.overtime_hours, NUMBER_FORMAT),
            (s.weekend_hours, NUMBER_FORMAT),
            (s.sunday_hours, NUMBER_FORMAT),
            (s.days_worked, None),
            (s.last_worked, None),
            (round_money(s.total_revenue), money),
            (round_money(s.total_cost), money),
            (round_money(s.total_profit), money),
            (s.margin, PERCENT_FORMAT),
            (round_money(s.travel_revenue), money),
            (round_money(s.travel_cost), money),
        ]
        for col, (value, fmt) in enumerate(values, start=1):
            _write_cell(ws, row, col, value, number_format=fmt)
        row += 1

    _write_cell(ws, row, 1, 'Total', bold=True)
    _write_cell(ws, row, 2, report.total_hours, number_format=NUMBER_FORMAT, bold=True)
    _write_cell(ws, row, 9, round_money(report.total_revenue), number_format=money, bold=True)
    _write_cell(ws, row, 10, round_money(report.total_cost), number_format=money, bold=True)
    _write_cell(ws, row, 11, round_money(report.total_profit), number_format=money, bold=True)

    _set_widths(ws, [24] + [13] * (len(labels) - 1))


def _write_work_hours_sheet(ws, report: PassReport, money: str) -> None:
    labels = [
        'Date', 'Technician', 'Customer', 'Source', 'Description', 'Regular',
        'Overtime', 'Saturday', 'Sunday', 'Total', 'Revenue', 'Cost', 'Profit',
    ]
    _write_title(ws, 'Work Hours', len(labels))
    _write_header(ws, 2, labels)

    priced = sorted(
        report.priced_entries,
        key=lambda p: (p.classified.date, p.classified.technician_id, p.classified.customer_id or ""),
    )
    for row, p in enumerate(priced, start=3):
        entry = p.classified.entry
        hours = p.classified.hours
        values = [
            (entry.date, None),
            (entry.display_name, None),
            (entry.customer_id or '', None),
            (entry.source.value, None),
            (entry.description, None),
            (hours.regular_hours, NUMBER_FORMAT),
            (hours.overtime_hours, NUMBER_FORMAT),
            (hours.weekend_hours, NUMBER_FORMAT),
            (hours.sunday_hours, NUMBER_FORMAT),
            (hours.total_hours, NUMBER_FORMAT),
            (round_money(p.revenue), money),
            (round_money(p.cost), money),
            (round_money(p.profit), money),
        ]
        for col, (value, fmt) in enumerate(values, start=1):
            _write_cell(ws, row, col, value, number_format=fmt)

    _set_widths(ws, [13, 22, 16, 10, 30] + [12] * (len(labels) - 5))


def _write_reconciliation_sheet(ws, report: PassReport) -> None:
    labels = [
        'Date', 'Technician', 'Customer', 'Manual Hours', 'Imported Hours',
        'Difference', 'Status', 'Verified',
    ]
    _write_title(ws, 'Manual vs Imported', len(labels))
    _write_header(ws, 2, labels)

    for row, slot in enumerate(report.slots, start=3):
        values = [
            (slot.date, None),
            (slot.display_name, None),
            (slot.customer_id or '', None),
            (slot.manual_hours, NUMBER_FORMAT),
            (slot.imported_hours, NUMBER_FORMAT),
            (slot.difference, NUMBER_FORMAT),
            (slot.status.value, None),
            ('yes' if slot.verified else 'no', None),
        ]
        for col, (value, fmt) in enumerate(values, start=1):
            _write_cell(ws, row, col, value, number_format=fmt)
        ws.cell(row=row, column=7).fill = STATUS_FILLS[slot.status]

    _set_widths(ws, [13, 22, 16, 15, 15, 12, 17, 10])


def _write_weekly_sheet(ws, report: PassReport) -> None:
    labels = ['Week Starting', 'All Hours', 'Regular', 'Overtime', 'Saturday', 'Sunday']
    _write_title(ws, 'Weekly Hours', len(labels))
    _write_header(ws, 2, labels)

    for row, rollup in enumerate(report.weekly, start=3):
        values = [
            (rollup.period_start, None),
            (rollup.all_hours, NUMBER_FORMAT),
            (rollup.regular_hours, NUMBER_FORMAT),
            (rollup.overtime_hours, NUMBER_FORMAT),
            (rollup.weekend_hours, NUMBER_FORMAT),
            (rollup.sunday_hours, NUMBER_FORMAT),
        ]
        for col, (value, fmt) in enumerate(values, start=1):
            _write_cell(ws, row, col, value, number_format=fmt)

    _set_widths(ws, [15, 12, 12, 12, 12, 12])
