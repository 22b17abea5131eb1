"""Pydantic request and response models for the Hours API."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


# --- Requests ---


class ReconcileRequest(BaseModel):
    as_of: dt.date | None = None
    period: str = "all"
    by_customer: bool = False
    technician_ids: list[str] | None = None
    include_audit: bool = False


class AgreeRequest(BaseModel):
    technician_id: str
    date: dt.date
    customer_id: str | None = None


class WebhookHours(BaseModel):
    id: str | None = None
    technician_id: str = Field(..., min_length=1)
    technician_name: str | None = None
    customer_id: str | None = None
    date: dt.date
    hours: float = Field(..., gt=0, le=24)
    description: str = ""
    start_time: str | None = None
    end_time: str | None = None


class ManualEntryIn(BaseModel):
    id: str | None = None
    technician_id: str = Field(..., min_length=1)
    technician_name: str | None = None
    customer_id: str | None = None
    date: dt.date
    hours_worked: float = Field(..., gt=0, le=24)
    description: str = ""
    start_time: str | None = None
    end_time: str | None = None
    travel_expense_to_technician: float = Field(0, ge=0)
    travel_expense_from_client: float = Field(0, ge=0)


class RateAgreementIn(BaseModel):
    technician_id: str = Field(..., min_length=1)
    hourly_rate: float = Field(0, ge=0)
    billable_rate: float = Field(0, ge=0)
    saturday_rate: float | None = Field(None, ge=0)
    sunday_rate: float | None = Field(None, ge=0)


class TravelAgreementIn(BaseModel):
    customer_id: str = Field(..., min_length=1)
    technician_id: str = Field(..., min_length=1)
    travel_expense_to_technician: float = Field(0, ge=0)
    travel_expense_from_client: float = Field(0, ge=0)


# --- Responses ---


class SlotSummary(BaseModel):
    technician_id: str
    technician_name: str
    date: str
    customer_id: str | None = None
    status: str
    verified: bool
    manual_hours: float
    imported_hours: float
    difference: float


class TechnicianSummary(BaseModel):
    technician_id: str
    technician_name: str
    total_hours: float
    regular_hours: float
    overtime_hours: float
    weekend_hours: float
    sunday_hours: float
    days_worked: int
    last_worked: str | None = None
    total_revenue: float
    total_cost: float
    total_profit: float
    margin: float


class RollupSummary(BaseModel):
    period_start: str
    all_hours: float
    regular_hours: float
    overtime_hours: float
    weekend_hours: float
    sunday_hours: float


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class PassSummary(BaseModel):
    as_of: str
    period: str
    date_range: DateRange
    total_technicians: int
    total_hours: float
    total_revenue: float
    total_cost: float
    total_profit: float
    slot_counts: dict[str, int]


class ReconcileResponse(BaseModel):
    success: bool
    summary: PassSummary | None = None
    slots: list[SlotSummary] | None = None
    technicians: list[TechnicianSummary] | None = None
    weekly: list[RollupSummary] | None = None
    monthly: list[RollupSummary] | None = None
    audit: dict | None = None
    skipped: list[str] | None = None
    write_errors: list[str] | None = None
    error_type: str | None = None
    errors: list[str] | None = None


class AgreeResponse(BaseModel):
    success: bool
    slot: SlotSummary | None = None
    error_type: str | None = None
    errors: list[str] | None = None


class StoredResponse(BaseModel):
    success: bool
    id: str | None = None
    error_type: str | None = None
    errors: list[str] | None = None
