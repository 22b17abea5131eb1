"""Technician hour reconciliation, classification and billing."""
