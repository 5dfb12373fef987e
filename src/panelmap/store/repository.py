"""Transactional SQLite store for collections, items and mapping rules."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
import sqlite3
import threading

from panelmap.errors import LocationConflict, StoreError
from panelmap.models import Collection, ImportRecord, Item, MappingRule
from panelmap.store.schema import PRAGMA_BUSY_TIMEOUT_MS, apply_runtime_pragmas, ensure_schema


logger = logging.getLogger(__name__)

_ITEM_COLUMNS = """
    id, collection_id, package_id, serial, section, row_number, column_number,
    placed_at, created_at, updated_at
"""


def _row_to_collection(row: sqlite3.Row) -> Collection:
    return Collection(
        id=int(row["id"]),
        name=row["name"],
        description=row["description"],
        image_ref=row["image_ref"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_item(row: sqlite3.Row) -> Item:
    return Item(
        id=int(row["id"]),
        collection_id=int(row["collection_id"]),
        package_id=row["package_id"],
        serial=row["serial"],
        section=row["section"],
        row=row["row_number"],
        column=row["column_number"],
        placed_at=row["placed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_rule(row: sqlite3.Row) -> MappingRule:
    return MappingRule(
        id=int(row["id"]),
        collection_id=int(row["collection_id"]),
        record_type=row["record_type"],
        field_path=row["field_path"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class InventoryRepository:
    """Thin transactional layer over the SQLite inventory schema.

    One instance owns one connection. The connection may be shared between
    threads; every statement and every transaction runs under a re-entrant
    lock. Write transactions use ``BEGIN IMMEDIATE`` so concurrent writers on
    other connections queue on the database write lock (bounded by
    ``busy_timeout``) instead of interleaving their read-check-write steps.
    """

    def __init__(
        self,
        db_path: str | Path,
        *,
        busy_timeout_ms: int = PRAGMA_BUSY_TIMEOUT_MS,
    ) -> None:
        self._db_path = Path(db_path)
        self._lock = threading.RLock()
        try:
            self._connection = sqlite3.connect(
                str(self._db_path),
                timeout=busy_timeout_ms / 1000,
                isolation_level=None,
                check_same_thread=False,
            )
            self._connection.row_factory = sqlite3.Row
            apply_runtime_pragmas(self._connection, busy_timeout_ms=busy_timeout_ms)
            ensure_schema(self._connection)
        except sqlite3.Error as exc:
            raise StoreError("open", str(exc)) from exc

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        with self._lock:
            self._connection.close()

    def __enter__(self) -> "InventoryRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except sqlite3.Error as exc:
                raise StoreError(operation, str(exc)) from exc

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed block as one write transaction.

        Nested calls join the outermost transaction. Any exception, including a
        failed COMMIT, rolls the whole transaction back and is re-raised.
        """

        with self._lock:
            if self._connection.in_transaction:
                yield self._connection
                return

            with self._guard("begin"):
                self._connection.execute("BEGIN IMMEDIATE")
            try:
                yield self._connection
            except BaseException as exc:
                self._connection.rollback()
                logger.debug("Rolled back transaction on %s: %r", self._db_path, exc)
                raise
            try:
                self._connection.commit()
            except sqlite3.Error as exc:
                if self._connection.in_transaction:
                    self._connection.rollback()
                logger.warning("Commit failed on %s, rolled back: %s", self._db_path, exc)
                raise StoreError("commit", str(exc)) from exc

    # Collections

    def create_collection(
        self,
        *,
        name: str,
        description: str | None = None,
        image_ref: str | None = None,
    ) -> Collection:
        with self._guard("create_collection"), self.transaction():
            cursor = self._connection.execute(
                "INSERT INTO collections(name, description, image_ref) VALUES(?, ?, ?)",
                (name, description, image_ref),
            )
            collection_id = int(cursor.lastrowid)
        created = self.get_collection(collection_id)
        if created is None:
            raise StoreError("create_collection", f"Collection row missing after insert: {collection_id}")
        return created

    def get_collection(self, collection_id: int) -> Collection | None:
        with self._guard("get_collection"):
            row = self._connection.execute(
                """
                SELECT id, name, description, image_ref, created_at, updated_at
                FROM collections
                WHERE id = ?
                """,
                (collection_id,),
            ).fetchone()
        if row is None:
            return None
        return _row_to_collection(row)

    def list_collections(self) -> list[Collection]:
        with self._guard("list_collections"):
            rows = self._connection.execute(
                """
                SELECT id, name, description, image_ref, created_at, updated_at
                FROM collections
                ORDER BY created_at DESC, id DESC
                """
            ).fetchall()
        return [_row_to_collection(row) for row in rows]

    def update_collection(
        self,
        collection_id: int,
        *,
        name: str,
        description: str | None = None,
        image_ref: str | None = None,
    ) -> Collection | None:
        with self._guard("update_collection"), self.transaction():
            cursor = self._connection.execute(
                """
                UPDATE collections
                SET name = ?, description = ?, image_ref = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (name, description, image_ref, collection_id),
            )
            if cursor.rowcount == 0:
                return None
        return self.get_collection(collection_id)

    def delete_collection(self, collection_id: int) -> bool:
        """Delete a collection together with its items and mapping rules."""

        with self._guard("delete_collection"), self.transaction():
            cursor = self._connection.execute("DELETE FROM collections WHERE id = ?", (collection_id,))
        return cursor.rowcount > 0

    # Items

    def count_items(self, collection_id: int) -> int:
        with self._guard("count_items"):
            row = self._connection.execute(
                "SELECT COUNT(*) AS c FROM items WHERE collection_id = ?",
                (collection_id,),
            ).fetchone()
        return int(row["c"])

    def list_items(self, collection_id: int) -> list[Item]:
        with self._guard("list_items"):
            rows = self._connection.execute(
                f"SELECT {_ITEM_COLUMNS} FROM items WHERE collection_id = ? ORDER BY id ASC",
                (collection_id,),
            ).fetchall()
        return [_row_to_item(row) for row in rows]

    def get_item_by_serial(self, collection_id: int, serial: str) -> Item | None:
        with self._guard("get_item_by_serial"):
            row = self._connection.execute(
                f"SELECT {_ITEM_COLUMNS} FROM items WHERE collection_id = ? AND serial = ?",
                (collection_id, serial),
            ).fetchone()
        if row is None:
            return None
        return _row_to_item(row)

    def get_item(self, item_id: int) -> Item | None:
        with self._guard("get_item"):
            row = self._connection.execute(
                f"SELECT {_ITEM_COLUMNS} FROM items WHERE id = ?",
                (item_id,),
            ).fetchone()
        if row is None:
            return None
        return _row_to_item(row)

    def list_serials(self, collection_id: int) -> set[str]:
        with self._guard("list_serials"):
            rows = self._connection.execute(
                "SELECT serial FROM items WHERE collection_id = ?",
                (collection_id,),
            ).fetchall()
        return {row["serial"] for row in rows}

    def insert_items(self, collection_id: int, records: list[ImportRecord]) -> int:
        """Insert unplaced items, skipping serials the collection already holds.

        The unique (collection_id, serial) constraint is the final guard, so
        the returned count only includes rows that were actually written.
        """

        if not records:
            return 0

        with self._guard("insert_items"), self.transaction():
            cursor = self._connection.executemany(
                """
                INSERT INTO items(collection_id, package_id, serial)
                VALUES(?, ?, ?)
                ON CONFLICT(collection_id, serial) DO NOTHING
                """,
                [(collection_id, record.package_id, record.serial) for record in records],
            )
        return max(int(cursor.rowcount), 0)

    def find_item_at(
        self,
        collection_id: int,
        *,
        section: str,
        row: int,
        column: int,
    ) -> Item | None:
        """Return the placed item holding a placement key, if any."""

        with self._guard("find_item_at"):
            found = self._connection.execute(
                f"""
                SELECT {_ITEM_COLUMNS}
                FROM items
                WHERE collection_id = ?
                  AND section = ?
                  AND row_number = ?
                  AND column_number = ?
                  AND placed_at IS NOT NULL
                """,
                (collection_id, section, row, column),
            ).fetchone()
        if found is None:
            return None
        return _row_to_item(found)

    def update_item_placement(
        self,
        item_id: int,
        *,
        section: str,
        row: int,
        column: int | None,
        placed_at: str,
    ) -> Item | None:
        """Place an unplaced item. Returns ``None`` if it was already placed."""

        with self._guard("update_item_placement"), self.transaction():
            try:
                cursor = self._connection.execute(
                    """
                    UPDATE items
                    SET section = ?,
                        row_number = ?,
                        column_number = ?,
                        placed_at = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ? AND placed_at IS NULL
                    """,
                    (section, row, column, placed_at, item_id),
                )
            except sqlite3.IntegrityError as exc:
                if column is None or "UNIQUE" not in str(exc):
                    raise
                raise LocationConflict(section=section, row=row, column=column) from exc
            if cursor.rowcount == 0:
                return None
        return self.get_item(item_id)

    def relocate_item(
        self,
        item_id: int,
        *,
        section: str,
        row: int,
        column: int | None,
    ) -> Item | None:
        """Move a placed item, keeping its placement timestamp."""

        with self._guard("relocate_item"), self.transaction():
            try:
                cursor = self._connection.execute(
                    """
                    UPDATE items
                    SET section = ?,
                        row_number = ?,
                        column_number = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ? AND placed_at IS NOT NULL
                    """,
                    (section, row, column, item_id),
                )
            except sqlite3.IntegrityError as exc:
                if column is None or "UNIQUE" not in str(exc):
                    raise
                raise LocationConflict(section=section, row=row, column=column) from exc
            if cursor.rowcount == 0:
                return None
        return self.get_item(item_id)

    def delete_item(self, item_id: int) -> bool:
        with self._guard("delete_item"), self.transaction():
            cursor = self._connection.execute("DELETE FROM items WHERE id = ?", (item_id,))
        return cursor.rowcount > 0

    # Mapping rules

    def list_mapping_rules(self, collection_id: int) -> list[MappingRule]:
        """Return rules in creation order, which is their resolution priority."""

        with self._guard("list_mapping_rules"):
            rows = self._connection.execute(
                """
                SELECT id, collection_id, record_type, field_path, description, created_at, updated_at
                FROM mapping_rules
                WHERE collection_id = ?
                ORDER BY id ASC
                """,
                (collection_id,),
            ).fetchall()
        return [_row_to_rule(row) for row in rows]

    def get_mapping_rule(self, rule_id: int) -> MappingRule | None:
        with self._guard("get_mapping_rule"):
            row = self._connection.execute(
                """
                SELECT id, collection_id, record_type, field_path, description, created_at, updated_at
                FROM mapping_rules
                WHERE id = ?
                """,
                (rule_id,),
            ).fetchone()
        if row is None:
            return None
        return _row_to_rule(row)

    def add_mapping_rule(
        self,
        collection_id: int,
        *,
        record_type: str,
        field_path: str,
        description: str | None = None,
    ) -> MappingRule:
        with self._guard("add_mapping_rule"), self.transaction():
            cursor = self._connection.execute(
                """
                INSERT INTO mapping_rules(collection_id, record_type, field_path, description)
                VALUES(?, ?, ?, ?)
                """,
                (collection_id, record_type, field_path, description),
            )
            rule_id = int(cursor.lastrowid)
        created = self.get_mapping_rule(rule_id)
        if created is None:
            raise StoreError("add_mapping_rule", f"Mapping rule row missing after insert: {rule_id}")
        return created

    def update_mapping_rule(
        self,
        rule_id: int,
        *,
        record_type: str | None = None,
        field_path: str | None = None,
        description: str | None = None,
    ) -> MappingRule | None:
        """Update a rule. Omitted fields keep their stored values."""

        with self._guard("update_mapping_rule"), self.transaction():
            cursor = self._connection.execute(
                """
                UPDATE mapping_rules
                SET record_type = COALESCE(?, record_type),
                    field_path = COALESCE(?, field_path),
                    description = COALESCE(?, description),
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (record_type, field_path, description, rule_id),
            )
            if cursor.rowcount == 0:
                return None
        return self.get_mapping_rule(rule_id)

    def delete_mapping_rule(self, rule_id: int) -> bool:
        with self._guard("delete_mapping_rule"), self.transaction():
            cursor = self._connection.execute("DELETE FROM mapping_rules WHERE id = ?", (rule_id,))
        return cursor.rowcount > 0
