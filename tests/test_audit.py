"""Tests for the audit JSON output."""

import asyncio
import json
import pytest
from datetime import date
from decimal import Decimal

from hours_tool.audit import DecimalEncoder, generate_audit, generate_audit_dict
from hours_tool.config import Settings
from hours_tool.service import run_pass
from hours_tool.store import InMemoryStore


def _make_report():
    store = InMemoryStore(
        manual=[
            {"id": "m1", "technician_id": "T1", "date": "2024-06-10", "hours_worked": 8, "customer_id": "C1"},
        ],
        imported=[
            {"id": "w1", "technician_id": "T1", "date": "2024-06-10", "hours": 8, "customer_id": "C1"},
            {"id": "w2", "technician_id": "T2", "date": "2024-06-11", "hours": 3},
        ],
        rates=[{"technician_id": "T1", "hourly_rate": 20, "billable_rate": 50}],
        travel=[{"customer_id": "C1", "technician_id": "T1",
                 "travel_expense_to_technician": 10, "travel_expense_from_client": 25}],
    )
    return asyncio.run(run_pass(store, Settings(), as_of=date(2024, 6, 12))).report


class TestAuditDict:
    def test_structure(self):
        audit = generate_audit_dict(_make_report())
        assert audit["as_of"] == "2024-06-12"
        assert audit["period"] == {"kind": "all", "start": None, "end": None}
        assert audit["slot_counts"]["total"] == 2
        assert audit["slot_counts"]["verified"] == 1

    def test_slots_trace_record_ids(self):
        audit = generate_audit_dict(_make_report())
        first = audit["slots"][0]
        assert first["manual_ids"] == ["m1"]
        assert first["imported_ids"] == ["w1"]
        assert first["status"] == "match"
        assert first["verified"] is True

    def test_entries_priced(self):
        audit = generate_audit_dict(_make_report())
        by_id = {e["id"]: e for e in audit["entries"]}
        assert by_id["m1"]["source"] == "manual"
        assert by_id["m1"]["revenue"] == 425.0
        assert by_id["m1"]["cost"] == 170.0
        assert by_id["m1"]["travel_revenue"] == 25.0
        assert by_id["w2"]["source"] == "imported"
        assert by_id["w2"]["cost"] == 0.0

    def test_summary_totals(self):
        audit = generate_audit_dict(_make_report())
        assert audit["summary"]["total_technicians"] == 2
        assert audit["summary"]["total_hours"] == 11.0
        assert audit["summary"]["total_profit"] == 255.0
        assert len(audit["weekly"]) == 1
        assert audit["skipped"] == []


class TestAuditFile:
    def test_writes_json(self, tmp_path):
        out = generate_audit(_make_report(), tmp_path / "audit.json")
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["as_of"] == "2024-06-12"
        assert len(data["technicians"]) == 2

    def test_decimal_encoder(self):
        text = json.dumps({"a": Decimal("1.50"), "d": date(2024, 6, 10)}, cls=DecimalEncoder)
        assert json.loads(text) == {"a": 1.5, "d": "2024-06-10"}
