"""Canonical data structures shared by the store and the engine components."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Collection:
    """A named project grouping of items."""

    id: int
    name: str
    description: str | None = None
    image_ref: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_ref": self.image_ref,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(slots=True)
class Placement:
    """Grid location of a placed item. Column is absent for row-only scans."""

    section: str
    row: int
    column: int | None = None

    def label(self) -> str:
        if self.column is None:
            return f"{self.section}-{self.row}"
        return f"{self.section}-{self.row}-{self.column}"


@dataclass(slots=True)
class Item:
    """One serialized physical unit tracked inside a collection."""

    id: int
    collection_id: int
    package_id: str
    serial: str
    section: str | None = None
    row: int | None = None
    column: int | None = None
    placed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_placed(self) -> bool:
        return self.placed_at is not None

    @property
    def placement(self) -> Placement | None:
        if self.placed_at is None or self.section is None or self.row is None:
            return None
        return Placement(section=self.section, row=self.row, column=self.column)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "collection_id": self.collection_id,
            "package_id": self.package_id,
            "serial": self.serial,
            "section": self.section,
            "row": self.row,
            "column": self.column,
            "placed_at": self.placed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(slots=True)
class MappingRule:
    """Extraction rule: which tag record type to read and which field to pull."""

    id: int
    collection_id: int
    record_type: str
    field_path: str
    description: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "collection_id": self.collection_id,
            "record_type": self.record_type,
            "field_path": self.field_path,
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True, slots=True)
class ImportRecord:
    """Candidate item supplied by the bulk-import collaborator."""

    package_id: str
    serial: str
