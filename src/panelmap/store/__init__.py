"""Durable SQLite storage for collections, items and mapping rules."""

from .repository import InventoryRepository
from .schema import apply_runtime_pragmas, ensure_schema

__all__ = ["InventoryRepository", "apply_runtime_pragmas", "ensure_schema"]
