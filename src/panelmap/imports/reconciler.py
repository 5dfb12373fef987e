"""Duplicate-free merging of bulk-imported item batches into a collection."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Iterable, Mapping

from panelmap.errors import NotFound, ValidationError
from panelmap.models import ImportRecord
from panelmap.store.repository import InventoryRepository


logger = logging.getLogger(__name__)

PACKAGE_ID_ALIASES = ("package_id", "pallet_no", "Pallet No")
SERIAL_ALIASES = ("serial", "serial_code", "Serial Code")


@dataclass(slots=True)
class ImportStats:
    inserted: int = 0
    submitted: int = 0
    duration_ms: int = 0

    @property
    def duplicates(self) -> int:
        return self.submitted - self.inserted

    def to_dict(self) -> dict[str, int]:
        return {
            "inserted": self.inserted,
            "submitted": self.submitted,
            "duplicates": self.duplicates,
            "duration_ms": self.duration_ms,
        }


def _first_present(row: Mapping[str, Any], aliases: tuple[str, ...]) -> str:
    for key in aliases:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value)
    return ""


def coerce_records(rows: Iterable[Mapping[str, Any]]) -> list[ImportRecord]:
    """Map loosely keyed rows onto candidate records without validating them.

    Rows come from the bulk-import collaborator (spreadsheet or delimited file
    already split into dicts). Header aliases used in the field are accepted.
    """

    return [
        ImportRecord(
            package_id=_first_present(row, PACKAGE_ID_ALIASES),
            serial=_first_present(row, SERIAL_ALIASES),
        )
        for row in rows
    ]


def validate_records(records: Iterable[ImportRecord]) -> list[ImportRecord]:
    """Trim every record and reject the batch on the first malformed one."""

    cleaned: list[ImportRecord] = []
    for index, record in enumerate(records):
        package_id = (record.package_id or "").strip()
        serial = (record.serial or "").strip()
        if not package_id:
            raise ValidationError("package_id", "Package id is required", record_index=index)
        if not serial:
            raise ValidationError("serial", "Serial is required", record_index=index)
        cleaned.append(ImportRecord(package_id=package_id, serial=serial))
    return cleaned


class ImportReconciler:
    """Insert only the records whose serial the collection does not hold yet."""

    def __init__(self, repository: InventoryRepository) -> None:
        self._repository = repository

    def import_batch(self, collection_id: int, records: Iterable[ImportRecord]) -> ImportStats:
        started = time.perf_counter()
        candidates = validate_records(records)
        stats = ImportStats(submitted=len(candidates))

        with self._repository.transaction():
            if self._repository.get_collection(collection_id) is None:
                raise NotFound("collection", str(collection_id))

            existing = self._repository.list_serials(collection_id)
            fresh: list[ImportRecord] = []
            for record in candidates:
                if record.serial in existing:
                    continue
                existing.add(record.serial)
                fresh.append(record)

            stats.inserted = self._repository.insert_items(collection_id, fresh)

        stats.duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Imported %d of %d records into collection %s (%d duplicates skipped)",
            stats.inserted,
            stats.submitted,
            collection_id,
            stats.duplicates,
        )
        return stats
