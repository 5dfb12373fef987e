from __future__ import annotations

from pathlib import Path
import sqlite3

import pytest

from panelmap.errors import StoreError
from panelmap.models import ImportRecord
from panelmap.store.repository import InventoryRepository


def test_schema_initialization_creates_expected_tables(tmp_path: Path) -> None:
    with InventoryRepository(tmp_path / "inventory.db") as repo:
        table_rows = repo.connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
        table_names = {row["name"] for row in table_rows}

        assert {"collections", "items", "mapping_rules"} <= table_names

        index_rows = repo.connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'index'"
        ).fetchall()
        assert "uq_items_placement" in {row["name"] for row in index_rows}

        columns = {row["name"] for row in repo.connection.execute("PRAGMA table_info(collections)")}
        assert "image_ref" in columns


def test_schema_is_idempotent_across_reopen(tmp_path: Path) -> None:
    db_path = tmp_path / "inventory.db"
    with InventoryRepository(db_path) as repo:
        repo.create_collection(name="Roof A")

    with InventoryRepository(db_path) as repo:
        assert [collection.name for collection in repo.list_collections()] == ["Roof A"]


def test_runtime_pragmas_are_applied(tmp_path: Path) -> None:
    with InventoryRepository(tmp_path / "inventory.db", busy_timeout_ms=1234) as repo:
        journal_mode = repo.connection.execute("PRAGMA journal_mode").fetchone()[0]
        busy_timeout = repo.connection.execute("PRAGMA busy_timeout").fetchone()[0]
        foreign_keys = repo.connection.execute("PRAGMA foreign_keys").fetchone()[0]

    assert str(journal_mode).lower() == "wal"
    assert int(busy_timeout) == 1234
    assert int(foreign_keys) == 1


def test_serial_is_unique_within_collection_only(tmp_path: Path) -> None:
    with InventoryRepository(tmp_path / "inventory.db") as repo:
        first = repo.create_collection(name="First")
        second = repo.create_collection(name="Second")

        assert repo.insert_items(first.id, [ImportRecord("P1", "S1")]) == 1
        assert repo.insert_items(first.id, [ImportRecord("P2", "S1")]) == 0
        assert repo.insert_items(second.id, [ImportRecord("P1", "S1")]) == 1

        assert repo.count_items(first.id) == 1
        assert repo.get_item_by_serial(first.id, "S1").package_id == "P1"


def test_placement_index_rejects_second_item_at_same_location(tmp_path: Path) -> None:
    with InventoryRepository(tmp_path / "inventory.db") as repo:
        collection = repo.create_collection(name="Field")
        repo.insert_items(collection.id, [ImportRecord("P1", "S1"), ImportRecord("P1", "S2")])
        first = repo.get_item_by_serial(collection.id, "S1")
        second = repo.get_item_by_serial(collection.id, "S2")

        repo.update_item_placement(first.id, section="A", row=1, column=1, placed_at="2024-01-01T00:00:00+00:00")

        with pytest.raises(sqlite3.IntegrityError):
            repo.connection.execute(
                """
                UPDATE items
                SET section = 'A', row_number = 1, column_number = 1, placed_at = 'now'
                WHERE id = ?
                """,
                (second.id,),
            )


def test_row_only_placements_may_share_a_row(tmp_path: Path) -> None:
    with InventoryRepository(tmp_path / "inventory.db") as repo:
        collection = repo.create_collection(name="Field")
        repo.insert_items(collection.id, [ImportRecord("P1", "S1"), ImportRecord("P1", "S2")])

        for serial in ("S1", "S2"):
            item = repo.get_item_by_serial(collection.id, serial)
            placed = repo.update_item_placement(
                item.id,
                section="A",
                row=3,
                column=None,
                placed_at="2024-01-01T00:00:00+00:00",
            )
            assert placed is not None
            assert placed.column is None

        assert all(item.is_placed for item in repo.list_items(collection.id))


def test_placement_check_constraint_rejects_partial_state(tmp_path: Path) -> None:
    with InventoryRepository(tmp_path / "inventory.db") as repo:
        collection = repo.create_collection(name="Field")
        repo.insert_items(collection.id, [ImportRecord("P1", "S1")])

        with pytest.raises(sqlite3.IntegrityError):
            repo.connection.execute(
                "UPDATE items SET section = 'A' WHERE collection_id = ?",
                (collection.id,),
            )


def test_delete_collection_cascades_to_items_and_rules(tmp_path: Path) -> None:
    with InventoryRepository(tmp_path / "inventory.db") as repo:
        collection = repo.create_collection(name="Field")
        repo.insert_items(collection.id, [ImportRecord("P1", "S1")])
        repo.add_mapping_rule(collection.id, record_type="text", field_path="serial")

        assert repo.delete_collection(collection.id) is True
        assert repo.delete_collection(collection.id) is False

        items_left = repo.connection.execute("SELECT COUNT(*) AS c FROM items").fetchone()["c"]
        rules_left = repo.connection.execute("SELECT COUNT(*) AS c FROM mapping_rules").fetchone()["c"]
        assert items_left == 0
        assert rules_left == 0


def test_open_failure_is_reported_as_store_error(tmp_path: Path) -> None:
    with pytest.raises(StoreError) as excinfo:
        InventoryRepository(tmp_path / "missing-dir" / "inventory.db")

    assert excinfo.value.operation == "open"
