"""External store boundary.

The engine reads four collections and writes one flag. Each collection is
fetched in a single round-trip; no per-row calls are made.
"""

from __future__ import annotations

import copy
import json
import logging
import uuid
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

from hours_tool.models import EntrySource, VerifyWriteError
from hours_tool.parsers.rows import normalize_row, source_of

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class HoursStore(Protocol):
    async def fetch_manual_entries(self) -> list[Row]: ...

    async def fetch_imported_entries(self) -> list[Row]: ...

    async def fetch_rate_agreements(self) -> list[Row]: ...

    async def fetch_travel_agreements(self) -> list[Row]: ...

    async def mark_verified(self, ids: list[str]) -> None: ...


class InMemoryStore:
    """Process-local store used by the CLI, the API and the tests."""

    def __init__(
        self,
        manual: Iterable[Mapping[str, Any]] = (),
        imported: Iterable[Mapping[str, Any]] = (),
        rates: Iterable[Mapping[str, Any]] = (),
        travel: Iterable[Mapping[str, Any]] = (),
    ) -> None:
        self.manual: list[Row] = []
        self.imported: list[Row] = []
        self.rates: list[Row] = []
        self.travel: list[Row] = []
        self.verify_calls: list[list[str]] = []
        for row in manual:
            self.add_manual(row)
        for row in imported:
            self.add_imported(row)
        for row in rates:
            self.upsert_rate(row)
        for row in travel:
            self.upsert_travel(row)

    # --- reads ---

    async def fetch_manual_entries(self) -> list[Row]:
        return copy.deepcopy(self.manual)

    async def fetch_imported_entries(self) -> list[Row]:
        return copy.deepcopy(self.imported)

    async def fetch_rate_agreements(self) -> list[Row]:
        return copy.deepcopy(self.rates)

    async def fetch_travel_agreements(self) -> list[Row]:
        return copy.deepcopy(self.travel)

    # --- writes ---

    async def mark_verified(self, ids: list[str]) -> None:
        wanted = set(ids)
        known = {row["id"] for row in self.imported}
        unknown = wanted - known
        if unknown:
            raise VerifyWriteError(f"Unknown imported record id(s): {', '.join(sorted(unknown))}")
        self.verify_calls.append(list(ids))
        for row in self.imported:
            if row["id"] in wanted:
                row["verified"] = True
        logger.debug("Marked %d imported record(s) verified", len(wanted))

    def add_manual(self, row: Mapping[str, Any]) -> Row:
        stored = normalize_row(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored["source"] = EntrySource.MANUAL.value
        self.manual.append(stored)
        return stored

    def add_imported(self, row: Mapping[str, Any]) -> Row:
        stored = normalize_row(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored["source"] = EntrySource.IMPORTED.value
        stored["verified"] = bool(stored.get("verified", False))
        self.imported.append(stored)
        return stored

    def add_entry(self, row: Mapping[str, Any]) -> Row:
        if source_of(row) is EntrySource.IMPORTED:
            return self.add_imported(row)
        return self.add_manual(row)

    def upsert_rate(self, row: Mapping[str, Any]) -> Row:
        stored = normalize_row(row)
        self.rates = [r for r in self.rates if r.get("technician_id") != stored.get("technician_id")]
        self.rates.append(stored)
        return stored

    def upsert_travel(self, row: Mapping[str, Any]) -> Row:
        stored = normalize_row(row)
        pair = (stored.get("customer_id"), stored.get("technician_id"))
        self.travel = [
            r for r in self.travel
            if (r.get("customer_id"), r.get("technician_id")) != pair
        ]
        self.travel.append(stored)
        return stored

    # --- files ---

    @classmethod
    def from_files(
        cls,
        entries_path: str | Path,
        rates_path: str | Path | None = None,
        travel_path: str | Path | None = None,
    ) -> InMemoryStore:
        """Load a store from JSON files (lists of rows)."""
        store = cls()
        for row in _read_json_rows(entries_path):
            store.add_entry(row)
        if rates_path:
            for row in _read_json_rows(rates_path):
                store.upsert_rate(row)
        if travel_path:
            for row in _read_json_rows(travel_path):
                store.upsert_travel(row)
        return store

    def dump_entries(self, path: str | Path) -> Path:
        path = Path(path)
        path.write_text(json.dumps(self.manual + self.imported, indent=2, default=str), encoding="utf-8")
        return path


def _read_json_rows(path: str | Path) -> list[Row]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of rows")
    return data
