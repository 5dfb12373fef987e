"""Bulk import reconciliation."""

from .reconciler import ImportReconciler, ImportStats, coerce_records, validate_records

__all__ = ["ImportReconciler", "ImportStats", "coerce_records", "validate_records"]
