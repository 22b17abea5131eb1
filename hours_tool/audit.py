"""Audit Engine.

Generates full traceability JSON output for one pass: every slot with the
record ids behind it, every priced entry, the summaries and the rollups.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path

from hours_tool.engine.reconciliation import slot_counts
from hours_tool.models import PassReport, PeriodRollup, round_money


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, date):
            return obj.isoformat()
        return super().default(obj)


def _rollup_dict(rollup: PeriodRollup) -> dict:
    return {
        "period_start": rollup.period_start.isoformat(),
        "all_hours": float(rollup.all_hours),
        "regular_hours": float(rollup.regular_hours),
        "overtime_hours": float(rollup.overtime_hours),
        "weekend_hours": float(rollup.weekend_hours),
        "sunday_hours": float(rollup.sunday_hours),
    }


def generate_audit_dict(report: PassReport) -> dict:
    """Build audit dictionary from a pass report (no file I/O)."""
    slots = [
        {
            "technician_id": s.technician_id,
            "technician_name": s.display_name,
            "date": s.date.isoformat(),
            "customer_id": s.customer_id,
            "status": s.status.value,
            "verified": s.verified,
            "manual_hours": float(s.manual_hours),
            "imported_hours": float(s.imported_hours),
            "difference": float(s.difference),
            "authoritative_hours": float(s.authoritative_hours),
            "manual_ids": s.manual_ids,
            "imported_ids": s.imported_ids,
        }
        for s in report.slots
    ]

    entries = [
        {
            "id": p.classified.entry.id,
            "source": p.classified.entry.source.value,
            "technician_id": p.classified.technician_id,
            "customer_id": p.classified.customer_id,
            "date": p.classified.date.isoformat(),
            "hours": {
                "regular": float(p.classified.hours.regular_hours),
                "overtime": float(p.classified.hours.overtime_hours),
                "weekend": float(p.classified.hours.weekend_hours),
                "sunday": float(p.classified.hours.sunday_hours),
                "total": float(p.classified.hours.total_hours),
            },
            "cost": float(round_money(p.cost)),
            "revenue": float(round_money(p.revenue)),
            "profit": float(round_money(p.profit)),
            "travel_cost": float(round_money(p.travel_cost)),
            "travel_revenue": float(round_money(p.travel_revenue)),
        }
        for p in report.priced_entries
    ]

    technicians = [
        {
            "technician_id": s.technician_id,
            "technician_name": s.technician_name,
            "hours": {
                "total": float(s.total_hours),
                "regular": float(s.regular_hours),
                "overtime": float(s.overtime_hours),
                "weekend": float(s.weekend_hours),
                "sunday": float(s.sunday_hours),
            },
            "days_worked": s.days_worked,
            "last_worked": s.last_worked.isoformat() if s.last_worked else None,
            "revenue": float(round_money(s.total_revenue)),
            "cost": float(round_money(s.total_cost)),
            "profit": float(round_money(s.total_profit)),
            "travel_revenue": float(round_money(s.travel_revenue)),
            "travel_cost": float(round_money(s.travel_cost)),
        }
        for s in report.summaries
    ]

    return {
        "as_of": report.as_of.isoformat(),
        "period": {
            "kind": report.period.value,
            "start": report.period_start.isoformat() if report.period_start else None,
            "end": report.period_end.isoformat() if report.period_end else None,
        },
        "slot_counts": slot_counts(report.slots),
        "slots": slots,
        "entries": entries,
        "technicians": technicians,
        "weekly": [_rollup_dict(r) for r in report.weekly],
        "monthly": [_rollup_dict(r) for r in report.monthly],
        "summary": {
            "total_technicians": len(report.summaries),
            "total_hours": float(report.total_hours),
            "total_revenue": float(round_money(report.total_revenue)),
            "total_cost": float(round_money(report.total_cost)),
            "total_profit": float(round_money(report.total_profit)),
        },
        "skipped": list(report.skipped),
        "write_errors": list(report.write_errors),
    }


def generate_audit(report: PassReport, output_path: str | Path) -> Path:
    """Generate audit JSON file from a pass report."""
    output_path = Path(output_path)
    audit = generate_audit_dict(report)
    output_path.write_text(json.dumps(audit, indent=2, cls=DecimalEncoder), encoding='utf-8')
    return output_path
