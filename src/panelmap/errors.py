"""Domain errors raised by the reconciliation and placement engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


class InventoryError(Exception):
    """Base class for every error the engine surfaces to callers."""

    kind: ClassVar[str] = "inventory_error"

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, "message": str(self)}


@dataclass(slots=True)
class ValidationError(InventoryError):
    """Malformed input rejected before anything reaches the store."""

    kind: ClassVar[str] = "validation_error"

    field: str
    message: str
    record_index: int | None = None

    def __str__(self) -> str:
        if self.record_index is None:
            return f"{self.field}: {self.message}"
        return f"record {self.record_index}: {self.field}: {self.message}"


@dataclass(slots=True)
class NotPlaced(ValidationError):
    kind: ClassVar[str] = "not_placed"


@dataclass(slots=True)
class NotFound(InventoryError):
    kind: ClassVar[str] = "not_found"

    entity: str
    key: str

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class AlreadyPlaced(InventoryError):
    """The item was placed by an earlier scan; placements are never overwritten."""

    kind: ClassVar[str] = "already_placed"

    serial: str
    section: str | None
    row: int | None
    column: int | None
    placed_at: str | None

    def __str__(self) -> str:
        location = _format_location(self.section, self.row, self.column)
        return f"Item {self.serial} already placed at {location} ({self.placed_at})"

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "message": str(self),
            "serial": self.serial,
            "section": self.section,
            "row": self.row,
            "column": self.column,
            "placed_at": self.placed_at,
        }


@dataclass(slots=True)
class LocationConflict(InventoryError):
    kind: ClassVar[str] = "location_conflict"

    section: str
    row: int
    column: int
    occupied_by: str | None = None

    def __str__(self) -> str:
        location = _format_location(self.section, self.row, self.column)
        if self.occupied_by is None:
            return f"Location {location} already occupied"
        return f"Location {location} already occupied by {self.occupied_by}"

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "message": str(self),
            "section": self.section,
            "row": self.row,
            "column": self.column,
            "occupied_by": self.occupied_by,
        }


@dataclass(slots=True)
class NotResolved(InventoryError):
    """No mapping rule produced an identifier for a tag message."""

    kind: ClassVar[str] = "not_resolved"

    collection_id: int

    def __str__(self) -> str:
        return f"No mapping rule resolved an identifier (collection={self.collection_id})"


@dataclass(slots=True)
class StoreError(InventoryError):
    """Opaque wrapper for storage failures the engine does not anticipate."""

    kind: ClassVar[str] = "store_error"

    operation: str
    message: str

    def __str__(self) -> str:
        return f"Store operation failed: {self.operation}: {self.message}"


def _format_location(section: str | None, row: int | None, column: int | None) -> str:
    if column is None:
        return f"{section}-{row}"
    return f"{section}-{row}-{column}"
