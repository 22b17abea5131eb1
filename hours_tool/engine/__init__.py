"""Classification, rating, pricing, reconciliation and aggregation engines."""
from hours_tool.engine.aggregation import (
    monthly_rollup,
    period_bounds,
    summarize,
    summarize_priced,
    weekly_rollup,
)
from hours_tool.engine.classifier import classify_entries, classify_entry, classify_hours
from hours_tool.engine.pricing import price_entries, price_entry
from hours_tool.engine.rates import RateBook
from hours_tool.engine.reconciliation import agree, auto_verify, build_slots, slot_counts
from hours_tool.engine.validator import validate_entries

__all__ = [
    "RateBook",
    "agree",
    "auto_verify",
    "build_slots",
    "classify_entries",
    "classify_entry",
    "classify_hours",
    "monthly_rollup",
    "period_bounds",
    "price_entries",
    "price_entry",
    "slot_counts",
    "summarize",
    "summarize_priced",
    "validate_entries",
    "weekly_rollup",
]
