"""Caller-facing facade over the inventory store and engine components."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from panelmap.errors import NotFound, NotResolved, ValidationError
from panelmap.imports.reconciler import ImportReconciler, ImportStats, coerce_records
from panelmap.layout.projector import LayoutSummary, SectionGrid, project_layout, summarize
from panelmap.mapping.resolver import TagRecord, resolve_identifier
from panelmap.models import Collection, ImportRecord, Item, MappingRule
from panelmap.placement.coordinator import PlacementCoordinator
from panelmap.store.repository import InventoryRepository
from panelmap.store.schema import PRAGMA_BUSY_TIMEOUT_MS


logger = logging.getLogger(__name__)

MAX_COLLECTION_NAME_LENGTH = 255


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _require_text(field_name: str, value: str | None, message: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field_name, message)
    return cleaned


class InventoryService:
    """Import, scan, resolve and project against one inventory store."""

    def __init__(self, repository: InventoryRepository) -> None:
        self._repository = repository
        self._reconciler = ImportReconciler(repository)
        self._coordinator = PlacementCoordinator(repository)

    @classmethod
    def from_db_path(
        cls,
        db_path: str | Path,
        *,
        busy_timeout_ms: int = PRAGMA_BUSY_TIMEOUT_MS,
    ) -> "InventoryService":
        return cls(InventoryRepository(db_path, busy_timeout_ms=busy_timeout_ms))

    @property
    def repository(self) -> InventoryRepository:
        return self._repository

    def close(self) -> None:
        self._repository.close()

    def __enter__(self) -> "InventoryService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Collections

    def create_collection(
        self,
        name: str,
        description: str | None = None,
        image_ref: str | None = None,
    ) -> Collection:
        cleaned_name = self._validate_collection_name(name)
        collection = self._repository.create_collection(
            name=cleaned_name,
            description=_clean_optional(description),
            image_ref=_clean_optional(image_ref),
        )
        logger.info("Created collection %s (%s)", collection.id, collection.name)
        return collection

    def get_collection(self, collection_id: int) -> Collection:
        collection = self._repository.get_collection(collection_id)
        if collection is None:
            raise NotFound("collection", str(collection_id))
        return collection

    def list_collections(self) -> list[Collection]:
        return self._repository.list_collections()

    def update_collection(
        self,
        collection_id: int,
        name: str,
        description: str | None = None,
        image_ref: str | None = None,
    ) -> Collection:
        cleaned_name = self._validate_collection_name(name)
        updated = self._repository.update_collection(
            collection_id,
            name=cleaned_name,
            description=_clean_optional(description),
            image_ref=_clean_optional(image_ref),
        )
        if updated is None:
            raise NotFound("collection", str(collection_id))
        return updated

    def delete_collection(self, collection_id: int) -> None:
        if not self._repository.delete_collection(collection_id):
            raise NotFound("collection", str(collection_id))
        logger.info("Deleted collection %s with its items and mapping rules", collection_id)

    # Mapping rules

    def add_rule(
        self,
        collection_id: int,
        record_type: str,
        field_path: str,
        description: str | None = None,
    ) -> MappingRule:
        cleaned_type = _require_text("record_type", record_type, "Record type is required")
        cleaned_path = _require_text("field_path", field_path, "Field path is required")
        with self._repository.transaction():
            self.get_collection(collection_id)
            return self._repository.add_mapping_rule(
                collection_id,
                record_type=cleaned_type,
                field_path=cleaned_path,
                description=_clean_optional(description),
            )

    def list_rules(self, collection_id: int) -> list[MappingRule]:
        self.get_collection(collection_id)
        return self._repository.list_mapping_rules(collection_id)

    def update_rule(
        self,
        rule_id: int,
        record_type: str | None = None,
        field_path: str | None = None,
        description: str | None = None,
    ) -> MappingRule:
        if record_type is not None:
            record_type = _require_text("record_type", record_type, "Record type cannot be empty")
        if field_path is not None:
            field_path = _require_text("field_path", field_path, "Field path cannot be empty")
        updated = self._repository.update_mapping_rule(
            rule_id,
            record_type=record_type,
            field_path=field_path,
            description=_clean_optional(description),
        )
        if updated is None:
            raise NotFound("mapping_rule", str(rule_id))
        return updated

    def delete_rule(self, rule_id: int) -> None:
        if not self._repository.delete_mapping_rule(rule_id):
            raise NotFound("mapping_rule", str(rule_id))

    # Engine operations

    def import_batch(
        self,
        collection_id: int,
        records: Iterable[ImportRecord | Mapping[str, Any]],
    ) -> ImportStats:
        candidates = [
            record if isinstance(record, ImportRecord) else coerce_records([record])[0]
            for record in records
        ]
        return self._reconciler.import_batch(collection_id, candidates)

    def scan(
        self,
        collection_id: int,
        serial: str,
        section: str,
        row: int,
        column: int | None = None,
    ) -> Item:
        return self._coordinator.scan(collection_id, serial, section, row, column)

    def scan_tag(
        self,
        collection_id: int,
        message: Sequence[TagRecord],
        section: str,
        row: int,
        column: int | None = None,
    ) -> Item:
        """Resolve the serial from a tag message with the collection's rules, then scan."""

        serial = self.resolve_identifier(self.list_rules(collection_id), message)
        if serial is None or not serial.strip():
            raise NotResolved(collection_id)
        return self.scan(collection_id, serial, section, row, column)

    def relocate(
        self,
        collection_id: int,
        serial: str,
        section: str,
        row: int,
        column: int | None = None,
    ) -> Item:
        return self._coordinator.relocate(collection_id, serial, section, row, column)

    def remove_item(self, collection_id: int, serial: str) -> None:
        self._coordinator.remove(collection_id, serial)

    def list_items(self, collection_id: int) -> list[Item]:
        self.get_collection(collection_id)
        return self._repository.list_items(collection_id)

    @staticmethod
    def resolve_identifier(rules: Iterable[MappingRule], message: Sequence[TagRecord]) -> str | None:
        return resolve_identifier(rules, message)

    def project_layout(self, collection_id: int) -> dict[str, SectionGrid]:
        return project_layout(self.list_items(collection_id))

    def summarize(self, collection_id: int) -> LayoutSummary:
        return summarize(self.list_items(collection_id))

    def _validate_collection_name(self, name: str) -> str:
        cleaned = _require_text("name", name, "Collection name is required")
        if len(cleaned) > MAX_COLLECTION_NAME_LENGTH:
            raise ValidationError("name", f"Collection name must be at most {MAX_COLLECTION_NAME_LENGTH} characters")
        return cleaned
