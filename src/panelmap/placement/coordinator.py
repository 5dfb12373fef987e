"""Scan-time placement of items into the section/row/column grid."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from panelmap.errors import AlreadyPlaced, LocationConflict, NotFound, NotPlaced, ValidationError
from panelmap.models import Item
from panelmap.store.repository import InventoryRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanRequest:
    """Validated scan input: identifier plus target location."""

    serial: str
    section: str
    row: int
    column: int | None = None

    @classmethod
    def build(cls, serial: str, section: str, row: int, column: int | None = None) -> "ScanRequest":
        serial_value = (serial or "").strip()
        section_value = (section or "").strip()
        if not serial_value:
            raise ValidationError("serial", "Serial is required")
        if not section_value:
            raise ValidationError("section", "Section is required")
        if isinstance(row, bool) or not isinstance(row, int) or row < 1:
            raise ValidationError("row", "Row must be an integer >= 1")
        if column is not None and (isinstance(column, bool) or not isinstance(column, int) or column < 1):
            raise ValidationError("column", "Column must be an integer >= 1")
        return cls(serial=serial_value, section=section_value, row=row, column=column)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class PlacementCoordinator:
    """Validate and commit scans so that no two items share a location.

    Existence, already-placed and location checks run in the same write
    transaction as the update; the partial unique index on the placement key
    backs the location check at the store level.
    """

    def __init__(self, repository: InventoryRepository, *, clock=_utc_now) -> None:
        self._repository = repository
        self._clock = clock

    def scan(
        self,
        collection_id: int,
        serial: str,
        section: str,
        row: int,
        column: int | None = None,
    ) -> Item:
        request = ScanRequest.build(serial, section, row, column)

        with self._repository.transaction():
            item = self._repository.get_item_by_serial(collection_id, request.serial)
            if item is None:
                raise NotFound("item", request.serial)

            if item.is_placed:
                raise AlreadyPlaced(
                    serial=item.serial,
                    section=item.section,
                    row=item.row,
                    column=item.column,
                    placed_at=item.placed_at,
                )

            self._check_location_free(collection_id, request, moving_item_id=item.id)

            placed = self._repository.update_item_placement(
                item.id,
                section=request.section,
                row=request.row,
                column=request.column,
                placed_at=self._clock(),
            )
            if placed is None:
                # Only reachable if the row changed underneath the transaction.
                raise AlreadyPlaced(
                    serial=item.serial,
                    section=None,
                    row=None,
                    column=None,
                    placed_at=None,
                )

        logger.info("Placed %s at %s", placed.serial, placed.placement.label())
        return placed

    def relocate(
        self,
        collection_id: int,
        serial: str,
        section: str,
        row: int,
        column: int | None = None,
    ) -> Item:
        """Correct the location of an already placed item."""

        request = ScanRequest.build(serial, section, row, column)

        with self._repository.transaction():
            item = self._repository.get_item_by_serial(collection_id, request.serial)
            if item is None:
                raise NotFound("item", request.serial)
            if not item.is_placed:
                raise NotPlaced("serial", f"Item {item.serial} has not been placed yet")

            self._check_location_free(collection_id, request, moving_item_id=item.id)

            moved = self._repository.relocate_item(
                item.id,
                section=request.section,
                row=request.row,
                column=request.column,
            )
            if moved is None:
                raise NotFound("item", request.serial)

        logger.info("Relocated %s to %s", moved.serial, moved.placement.label())
        return moved

    def remove(self, collection_id: int, serial: str) -> None:
        serial_value = (serial or "").strip()
        if not serial_value:
            raise ValidationError("serial", "Serial is required")

        with self._repository.transaction():
            item = self._repository.get_item_by_serial(collection_id, serial_value)
            if item is None or not self._repository.delete_item(item.id):
                raise NotFound("item", serial_value)

        logger.info("Removed %s from collection %s", serial_value, collection_id)

    def _check_location_free(self, collection_id: int, request: ScanRequest, *, moving_item_id: int) -> None:
        if request.column is None:
            return

        occupant = self._repository.find_item_at(
            collection_id,
            section=request.section,
            row=request.row,
            column=request.column,
        )
        if occupant is not None and occupant.id != moving_item_id:
            logger.warning(
                "Location %s-%d-%d in collection %s already holds %s",
                request.section,
                request.row,
                request.column,
                collection_id,
                occupant.serial,
            )
            raise LocationConflict(
                section=request.section,
                row=request.row,
                column=request.column,
                occupied_by=occupant.serial,
            )
