"""Reconciliation of manual entries against imported (webhook) hours.

Both streams are grouped per (technician, date), or per
(technician, date, customer) in the comparison view, and every slot is
classified from scratch on each pass:

- missing_manual:  imported > 0, manual == 0
- missing_webhook: manual > 0, imported == 0
- match:           manual == imported
- discrepancy:     both > 0 and unequal

A slot counts as verified only when it has at least one imported record
and all of them are verified. Pure manual slots have nothing to confirm
against and stay unverified.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from datetime import date
from typing import Protocol

from hours_tool.models import (
    ImportedEntry,
    ManualEntry,
    ReconciliationSlot,
    SlotStatus,
    VerifyWriteError,
    WorkEntry,
)

logger = logging.getLogger(__name__)


class VerifyWriter(Protocol):
    async def mark_verified(self, ids: list[str]) -> None: ...


def slot_key(entry: WorkEntry, by_customer: bool = False) -> tuple[str, date, str | None]:
    return (entry.technician_id, entry.date, entry.customer_id if by_customer else None)


def is_verified(slot: ReconciliationSlot) -> bool:
    return slot.has_imported and all(e.verified for e in slot.imported_entries)


def build_slots(
    manual: Iterable[ManualEntry],
    imported: Iterable[ImportedEntry],
    by_customer: bool = False,
) -> list[ReconciliationSlot]:
    """Group both streams into slots, ordered by date, technician, customer."""
    slots: dict[tuple[str, date, str | None], ReconciliationSlot] = {}

    def slot_for(entry: WorkEntry) -> ReconciliationSlot:
        key = slot_key(entry, by_customer)
        slot = slots.get(key)
        if slot is None:
            slot = ReconciliationSlot(
                technician_id=key[0],
                date=key[1],
                customer_id=key[2],
                technician_name=entry.technician_name,
            )
            slots[key] = slot
        elif slot.technician_name is None:
            slot.technician_name = entry.technician_name
        return slot

    for entry in manual:
        slot_for(entry).manual_entries.append(entry)
    for entry in imported:
        slot_for(entry).imported_entries.append(entry)

    result = sorted(
        slots.values(),
        key=lambda s: (s.date, s.technician_id, s.customer_id or ""),
    )
    for slot in result:
        slot.verified = is_verified(slot)
    return result


def slot_counts(slots: Iterable[ReconciliationSlot]) -> dict[str, int]:
    """Counters for the verification overview."""
    counts = {"match": 0, "discrepancy": 0, "missing": 0, "verified": 0, "total": 0}
    for slot in slots:
        counts["total"] += 1
        status = slot.status
        if status is SlotStatus.MATCH:
            counts["match"] += 1
        elif status is SlotStatus.DISCREPANCY:
            counts["discrepancy"] += 1
        else:
            counts["missing"] += 1
        if slot.verified:
            counts["verified"] += 1
    return counts


def _mark_slot_verified(slot: ReconciliationSlot) -> None:
    slot.imported_entries = [
        e if e.verified else dataclasses.replace(e, verified=True)
        for e in slot.imported_entries
    ]
    slot.verified = True


async def _write(writer: VerifyWriter, ids: list[str]) -> None:
    try:
        await writer.mark_verified(ids)
    except VerifyWriteError:
        raise
    except Exception as e:
        raise VerifyWriteError(f"Verify write failed for {len(ids)} record(s): {e}") from e


async def auto_verify(slots: list[ReconciliationSlot], writer: VerifyWriter) -> list[str]:
    """Mark every matching, not yet verified slot as verified.

    One batched write for the whole pass. Slots are only flipped in memory
    after the write succeeded; on failure they stay unverified and the
    error message is returned.
    """
    pending = [
        s for s in slots
        if s.status is SlotStatus.MATCH and s.has_imported and not s.verified
    ]
    if not pending:
        return []

    ids = [e.id for s in pending for e in s.imported_entries if not e.verified]
    try:
        await _write(writer, ids)
    except VerifyWriteError as e:
        logger.warning("Auto-verify failed, %d slot(s) left unverified: %s", len(pending), e)
        return [str(e)]

    for slot in pending:
        _mark_slot_verified(slot)
    logger.info("Auto-verified %d matching slot(s) (%d imported record(s))", len(pending), len(ids))
    return []


async def agree(slot: ReconciliationSlot, writer: VerifyWriter) -> ReconciliationSlot:
    """Force-verify a slot's imported records, whatever its status.

    Raises ValueError when the slot has no imported records and
    VerifyWriteError when the store rejects the write.
    """
    if not slot.has_imported:
        raise ValueError(
            f"Slot {slot.technician_id} on {slot.date} has no imported hours to agree with"
        )
    try:
        await _write(writer, slot.imported_ids)
    except VerifyWriteError:
        slot.verified = is_verified(slot)
        raise
    _mark_slot_verified(slot)
    logger.info(
        "Slot %s on %s agreed manually (status %s)",
        slot.technician_id, slot.date, slot.status.value,
    )
    return slot


def find_slot(
    slots: Iterable[ReconciliationSlot],
    technician_id: str,
    day: date,
    customer_id: str | None = None,
) -> ReconciliationSlot | None:
    for slot in slots:
        if slot.key == (technician_id, day, customer_id):
            return slot
    return None


def authoritative_entries(slots: Iterable[ReconciliationSlot]) -> list[WorkEntry]:
    """One authoritative entry set per slot: manual if any, else imported."""
    return [e for slot in slots for e in slot.authoritative_entries]
