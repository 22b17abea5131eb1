"""API routes for the Hours Reconciliation Tool."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from hours_tool.audit import generate_audit_dict
from hours_tool.config import Settings, load_settings
from hours_tool.engine.reconciliation import slot_counts
from hours_tool.models import (
    InvalidEntryError,
    Period,
    PeriodRollup,
    ReconciliationSlot,
    round_money,
)
from hours_tool.parsers.rows import (
    imported_entry_from_row,
    manual_entry_from_row,
    rate_agreement_from_row,
    travel_agreement_from_row,
)
from hours_tool.service import agree_slot, run_pass
from hours_tool.store import InMemoryStore

from api.schemas import (
    AgreeRequest,
    AgreeResponse,
    DateRange,
    ManualEntryIn,
    PassSummary,
    RateAgreementIn,
    ReconcileRequest,
    ReconcileResponse,
    RollupSummary,
    SlotSummary,
    StoredResponse,
    TechnicianSummary,
    TravelAgreementIn,
    WebhookHours,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")

_store = InMemoryStore()


def get_store() -> InMemoryStore:
    return _store


def get_settings() -> Settings:
    return load_settings()


def _slot_summary(slot: ReconciliationSlot) -> SlotSummary:
    return SlotSummary(
        technician_id=slot.technician_id,
        technician_name=slot.display_name,
        date=slot.date.isoformat(),
        customer_id=slot.customer_id,
        status=slot.status.value,
        verified=slot.verified,
        manual_hours=float(slot.manual_hours),
        imported_hours=float(slot.imported_hours),
        difference=float(slot.difference),
    )


def _rollup_summary(rollup: PeriodRollup) -> RollupSummary:
    return RollupSummary(
        period_start=rollup.period_start.isoformat(),
        all_hours=float(rollup.all_hours),
        regular_hours=float(rollup.regular_hours),
        overtime_hours=float(rollup.overtime_hours),
        weekend_hours=float(rollup.weekend_hours),
        sunday_hours=float(rollup.sunday_hours),
    )


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile(
    request: ReconcileRequest,
    store: InMemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Run one reconciliation and billing pass over the stored hours.

    Matching slots are auto-verified as part of the pass. Returns slot
    statuses, per-technician totals and weekly/monthly rollups.
    """
    try:
        period = Period(request.period)
    except ValueError:
        return ReconcileResponse(
            success=False,
            error_type="invalid_request",
            errors=[f"Unknown period '{request.period}' (expected week, month or all)"],
        )

    result = await run_pass(
        store,
        settings,
        as_of=request.as_of,
        period=period,
        by_customer=request.by_customer,
        technician_ids=request.technician_ids,
    )
    if not result.success:
        return ReconcileResponse(success=False, error_type=result.error_type, errors=result.errors)

    report = result.report
    technicians = [
        TechnicianSummary(
            technician_id=s.technician_id,
            technician_name=s.technician_name,
            total_hours=float(s.total_hours),
            regular_hours=float(s.regular_hours),
            overtime_hours=float(s.overtime_hours),
            weekend_hours=float(s.weekend_hours),
            sunday_hours=float(s.sunday_hours),
            days_worked=s.days_worked,
            last_worked=s.last_worked.isoformat() if s.last_worked else None,
            total_revenue=float(round_money(s.total_revenue)),
            total_cost=float(round_money(s.total_cost)),
            total_profit=float(round_money(s.total_profit)),
            margin=float(s.margin),
        )
        for s in report.summaries
    ]

    summary = PassSummary(
        as_of=report.as_of.isoformat(),
        period=report.period.value,
        date_range=DateRange(
            start=report.period_start.isoformat() if report.period_start else None,
            end=report.period_end.isoformat() if report.period_end else None,
        ),
        total_technicians=len(report.summaries),
        total_hours=float(report.total_hours),
        total_revenue=float(round_money(report.total_revenue)),
        total_cost=float(round_money(report.total_cost)),
        total_profit=float(round_money(report.total_profit)),
        slot_counts=slot_counts(report.slots),
    )

    return ReconcileResponse(
        success=True,
        summary=summary,
        slots=[_slot_summary(s) for s in report.slots],
        technicians=technicians,
        weekly=[_rollup_summary(r) for r in report.weekly],
        monthly=[_rollup_summary(r) for r in report.monthly],
        audit=generate_audit_dict(report) if request.include_audit else None,
        skipped=report.skipped,
        write_errors=report.write_errors,
    )


@router.post("/agree", response_model=AgreeResponse)
async def agree(
    request: AgreeRequest,
    store: InMemoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Manually confirm the imported hours of one technician-day."""
    result = await agree_slot(store, request.technician_id, request.date, request.customer_id, settings)
    return AgreeResponse(
        success=result.success,
        slot=_slot_summary(result.slot) if result.slot else None,
        error_type=result.error_type,
        errors=result.errors or None,
    )


@router.post("/webhook-hours", response_model=StoredResponse)
async def webhook_hours(payload: WebhookHours, store: InMemoryStore = Depends(get_store)):
    """Receive hours from the external time-capture integration."""
    row = payload.model_dump(exclude_none=True, mode="json")
    row["received_at"] = datetime.now(timezone.utc).isoformat()
    row["verified"] = False
    return _store_row(row, imported_entry_from_row, store.add_imported)


@router.post("/entries", response_model=StoredResponse)
async def create_entry(payload: ManualEntryIn, store: InMemoryStore = Depends(get_store)):
    """Record a manual entry."""
    row = payload.model_dump(exclude_none=True, mode="json")
    return _store_row(row, manual_entry_from_row, store.add_manual)


@router.put("/rates", response_model=StoredResponse)
async def put_rate(payload: RateAgreementIn, store: InMemoryStore = Depends(get_store)):
    """Create or replace a technician's rate agreement."""
    row = payload.model_dump(mode="json")
    return _store_row(row, rate_agreement_from_row, store.upsert_rate, id_field="technician_id")


@router.put("/travel", response_model=StoredResponse)
async def put_travel(payload: TravelAgreementIn, store: InMemoryStore = Depends(get_store)):
    """Create or replace a (customer, technician) travel agreement."""
    row = payload.model_dump(mode="json")
    stored = _store_row(row, travel_agreement_from_row, store.upsert_travel, id_field="customer_id")
    if stored.success:
        stored.id = f"{payload.customer_id}/{payload.technician_id}"
    return stored


def _store_row(row, converter, save, id_field: str = "id") -> StoredResponse:
    # Reject rows the engine could not convert later
    probe = dict(row)
    probe.setdefault("id", "pending")
    try:
        converter(probe)
    except InvalidEntryError as e:
        return StoredResponse(success=False, error_type="validation_error", errors=[str(e)])
    stored = save(row)
    logger.info("Stored %s %s", converter.__name__.removesuffix("_from_row"), stored.get(id_field))
    return StoredResponse(success=True, id=str(stored.get(id_field)))
