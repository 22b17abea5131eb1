"""CLI entry point.

Usage:
    python -m hours_tool report \
        --entries "entries.json" \
        --rates "rates.json" \
        --travel "travel.json" \
        --out "Hours_Report.xlsx" \
        --audit-out "Audit.json" \
        --period month --as-of 2024-06-15

    python -m hours_tool import-hours "June.xlsx" --out "entries.json"
"""

from __future__ import annotations

import asyncio
import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

from hours_tool.config import load_settings
from hours_tool.logging_config import configure_logging
from hours_tool.models import EntrySource, InvalidEntryError, Period, round_money

app = typer.Typer(help="Reconcile technician hours and compute billing.", no_args_is_help=True)


def _setup():
    settings = load_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    return settings


@app.command()
def report(
    entries: str = typer.Option(..., "--entries", help="JSON file with manual and imported entry rows"),
    rates: str = typer.Option(None, "--rates", help="JSON file with rate agreement rows"),
    travel: str = typer.Option(None, "--travel", help="JSON file with travel agreement rows"),
    out: str = typer.Option("Hours_Report.xlsx", "--out", help="Output Excel file path"),
    audit_out: str = typer.Option("Audit.json", "--audit-out", help="Output audit JSON file path"),
    as_of: str = typer.Option(None, "--as-of", help="Anchor date (YYYY-MM-DD), defaults to today"),
    period: Period = typer.Option(Period.ALL, "--period", help="week, month or all"),
    by_customer: bool = typer.Option(False, "--by-customer", help="Reconcile per customer as well"),
    technician: Optional[list[str]] = typer.Option(None, "--technician", help="Limit to technician id (repeatable)"),
    write_back: bool = typer.Option(False, "--write-back", help="Persist verified flags to the entries file"),
) -> None:
    """Reconcile, price and report hours from JSON exports of the store."""
    from hours_tool.audit import generate_audit
    from hours_tool.engine.reconciliation import slot_counts
    from hours_tool.excel import generate_excel_report
    from hours_tool.service import run_pass
    from hours_tool.store import InMemoryStore

    settings = _setup()
    out_path = Path(out)
    audit_path = Path(audit_out)

    try:
        anchor = date.fromisoformat(as_of) if as_of else None
    except ValueError:
        typer.echo(f"ERROR: --as-of must be YYYY-MM-DD, got '{as_of}'", err=True)
        raise typer.Exit(1)

    try:
        typer.echo(f"Entries: {entries}")
        store = InMemoryStore.from_files(entries, rates, travel)
        typer.echo(f"  Manual: {len(store.manual)}, imported: {len(store.imported)}")
        typer.echo(f"  Rate agreements: {len(store.rates)}, travel agreements: {len(store.travel)}")
    except (OSError, ValueError) as e:
        typer.echo(f"\nFATAL ERROR: {e}", err=True)
        raise typer.Exit(1)

    result = asyncio.run(run_pass(
        store,
        settings,
        as_of=anchor,
        period=period,
        by_customer=by_customer,
        technician_ids=technician or None,
    ))
    if not result.success:
        typer.echo(f"\nPASS FAILED ({result.error_type}):", err=True)
        for error in result.errors:
            typer.echo(f"  ERROR: {error}", err=True)
        raise typer.Exit(1)

    pass_report = result.report
    counts = slot_counts(pass_report.slots)
    typer.echo(
        f"\nSlots: {counts['total']} (match {counts['match']}, discrepancy {counts['discrepancy']}, "
        f"missing {counts['missing']}, verified {counts['verified']})"
    )

    currency = settings.currency
    for s in pass_report.summaries:
        typer.echo(f"  {s.technician_name}:")
        typer.echo(
            f"    Hours: {s.total_hours} (regular {s.regular_hours}, overtime {s.overtime_hours}, "
            f"Saturday {s.weekend_hours}, Sunday {s.sunday_hours})"
        )
        typer.echo(
            f"    Revenue: {currency} {round_money(s.total_revenue)}  "
            f"Cost: {currency} {round_money(s.total_cost)}  "
            f"Profit: {currency} {round_money(s.total_profit)}"
        )
    typer.echo(f"\n  TOTAL PROFIT: {currency} {round_money(pass_report.total_profit)}")

    for message in pass_report.skipped:
        typer.echo(f"  SKIPPED: {message}", err=True)
    for message in pass_report.write_errors:
        typer.echo(f"  WARNING: {message}", err=True)

    try:
        typer.echo(f"\nGenerating Excel report: {out_path}...")
        generate_excel_report(pass_report, out_path, settings)
        typer.echo(f"\nGenerating audit file: {audit_path}...")
        generate_audit(pass_report, audit_path)
        if write_back:
            store.dump_entries(entries)
            typer.echo(f"  Verified flags written to: {entries}")
    except OSError as e:
        typer.echo(f"\nFATAL ERROR: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("\nSUCCESS: Hours report generated.")


@app.command("import-hours")
def import_hours(
    file: str = typer.Argument(..., help="Spreadsheet (.xlsx or .csv) with work hours"),
    out: str = typer.Option("entries.json", "--out", help="Output JSON file path"),
    source: EntrySource = typer.Option(EntrySource.MANUAL, "--source", help="manual or imported"),
    append: bool = typer.Option(False, "--append", help="Append to an existing entries file"),
    strict: bool = typer.Option(False, "--strict/--no-strict", help="Fail on any rejected row"),
) -> None:
    """Convert a work-hours spreadsheet into entry rows."""
    from hours_tool.parsers import entry_to_row, parse_hours_file

    _setup()
    out_path = Path(out)

    try:
        entries, errors = parse_hours_file(file, source)
    except (OSError, InvalidEntryError) as e:
        typer.echo(f"\nFATAL ERROR: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Read {len(entries)} entries from {file}")
    for error in errors:
        typer.echo(f"  ERROR: {error}", err=True)
    if errors and strict:
        typer.echo("\nNothing written (strict mode).", err=True)
        raise typer.Exit(1)

    rows = [entry_to_row(e) for e in entries]
    if append and out_path.exists():
        existing = json.loads(out_path.read_text(encoding="utf-8"))
        rows = existing + rows
    out_path.write_text(json.dumps(rows, indent=2), encoding="utf-8")
    typer.echo(f"  Entries saved to: {out_path}")


if __name__ == "__main__":
    app()
