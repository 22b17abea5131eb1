"""One reconciliation and billing pass over an hours store.

fetch -> convert -> validate -> reconcile -> auto-verify -> classify
-> price -> aggregate

Failures come back as typed results; nothing raises across this module's
public functions except programming errors.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date
from typing import Any

from hours_tool.config import Settings
from hours_tool.engine.aggregation import (
    in_period,
    monthly_rollup,
    period_bounds,
    summarize_priced,
    weekly_rollup,
)
from hours_tool.engine.classifier import classify_entries
from hours_tool.engine.pricing import price_entries
from hours_tool.engine.rates import RateBook
from hours_tool.engine.reconciliation import (
    agree,
    authoritative_entries,
    auto_verify,
    build_slots,
    find_slot,
)
from hours_tool.engine.validator import validate_entries
from hours_tool.models import (
    AgreeResult,
    ImportedEntry,
    ManualEntry,
    PassReport,
    PassResult,
    Period,
    StoreUnavailableError,
    VerifyWriteError,
)
from hours_tool.parsers.rows import (
    convert_rows,
    imported_entry_from_row,
    manual_entry_from_row,
    rate_agreement_from_row,
    travel_agreement_from_row,
)
from hours_tool.store import HoursStore

logger = logging.getLogger(__name__)


@dataclass
class SourceRows:
    manual: list[dict[str, Any]]
    imported: list[dict[str, Any]]
    rates: list[dict[str, Any]]
    travel: list[dict[str, Any]]


async def fetch_sources(store: HoursStore, timeout: float) -> SourceRows:
    """Fetch all source collections or none of them.

    Raises StoreUnavailableError on any failure or when ``timeout`` expires.
    """
    try:
        manual, imported, rates, travel = await asyncio.wait_for(
            asyncio.gather(
                store.fetch_manual_entries(),
                store.fetch_imported_entries(),
                store.fetch_rate_agreements(),
                store.fetch_travel_agreements(),
            ),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        raise StoreUnavailableError(f"Store did not answer within {timeout}s") from None
    except Exception as e:
        raise StoreUnavailableError(f"Store fetch failed: {e}") from e
    return SourceRows(manual=manual, imported=imported, rates=rates, travel=travel)


@dataclass
class _Streams:
    manual: list[ManualEntry]
    imported: list[ImportedEntry]
    book: RateBook
    errors: list[str]


def _load_streams(
    rows: SourceRows,
    start: date | None,
    end: date | None,
    technician_ids: Collection[str] | None,
) -> _Streams:
    errors: list[str] = []

    manual, errs = convert_rows(rows.manual, manual_entry_from_row, "manual")
    errors.extend(errs)
    imported, errs = convert_rows(rows.imported, imported_entry_from_row, "imported")
    errors.extend(errs)
    rates, errs = convert_rows(rows.rates, rate_agreement_from_row, "rate")
    errors.extend(errs)
    travel, errs = convert_rows(rows.travel, travel_agreement_from_row, "travel")
    errors.extend(errs)

    def wanted(entry) -> bool:
        if technician_ids is not None and entry.technician_id not in technician_ids:
            return False
        return in_period(entry.date, start, end)

    manual, errs = validate_entries([e for e in manual if wanted(e)])
    errors.extend(errs)
    imported, errs = validate_entries([e for e in imported if wanted(e)])
    errors.extend(errs)

    return _Streams(manual=manual, imported=imported, book=RateBook(rates, travel), errors=errors)


async def run_pass(
    store: HoursStore,
    settings: Settings | None = None,
    *,
    as_of: date | None = None,
    period: Period = Period.ALL,
    by_customer: bool = False,
    technician_ids: Collection[str] | None = None,
) -> PassResult:
    """Reconcile, price and aggregate everything in the store.

    ``as_of`` anchors the week/month period; when omitted, today's date in
    the configured timezone is used.
    """
    settings = settings or Settings()
    as_of = as_of or settings.today()
    start, end = period_bounds(as_of, period, settings.week_start)

    try:
        rows = await fetch_sources(store, settings.store_timeout)
    except StoreUnavailableError as e:
        logger.warning("Pass aborted: %s", e)
        return PassResult(success=False, error_type="store_unavailable", errors=[str(e)])

    streams = _load_streams(rows, start, end, technician_ids)
    for message in streams.errors:
        logger.debug("Skipped: %s", message)

    slots = build_slots(streams.manual, streams.imported, by_customer=by_customer)
    # Must complete before results leave this function
    write_errors = await auto_verify(slots, store)

    classified, class_errors = classify_entries(authoritative_entries(slots))
    priced = price_entries(classified, streams.book)

    report = PassReport(
        as_of=as_of,
        period=period,
        period_start=start,
        period_end=end,
        slots=slots,
        priced_entries=priced,
        summaries=summarize_priced(priced),
        weekly=weekly_rollup(classified, settings.week_start),
        monthly=monthly_rollup(classified),
        skipped=streams.errors + class_errors,
        write_errors=write_errors,
    )
    logger.info(
        "Pass complete: %d slot(s), %d priced entr(ies), %d technician(s), %d skipped",
        len(slots), len(priced), len(report.summaries), len(report.skipped),
    )
    return PassResult(success=True, report=report)


async def agree_slot(
    store: HoursStore,
    technician_id: str,
    day: date,
    customer_id: str | None = None,
    settings: Settings | None = None,
) -> AgreeResult:
    """Manually confirm the imported hours of one slot."""
    settings = settings or Settings()
    try:
        rows = await fetch_sources(store, settings.store_timeout)
    except StoreUnavailableError as e:
        return AgreeResult(success=False, error_type="store_unavailable", errors=[str(e)])

    streams = _load_streams(rows, day, day, [technician_id])
    slots = build_slots(streams.manual, streams.imported, by_customer=customer_id is not None)
    slot = find_slot(slots, technician_id, day, customer_id)
    if slot is None:
        return AgreeResult(
            success=False,
            error_type="not_found",
            errors=[f"No hours recorded for {technician_id} on {day}"],
        )

    try:
        await agree(slot, store)
    except ValueError as e:
        return AgreeResult(success=False, slot=slot, error_type="nothing_to_verify", errors=[str(e)])
    except VerifyWriteError as e:
        logger.warning("Agree failed for %s on %s: %s", technician_id, day, e)
        return AgreeResult(success=False, slot=slot, error_type="write_failure", errors=[str(e)])
    return AgreeResult(success=True, slot=slot)
