"""SQLite schema and pragmas for the inventory store."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(
    connection: sqlite3.Connection,
    *,
    busy_timeout_ms: int = PRAGMA_BUSY_TIMEOUT_MS,
) -> None:
    """Apply pragmas for concurrent writers sharing one database file."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
    connection.execute("PRAGMA synchronous=NORMAL;")
    connection.execute("PRAGMA foreign_keys=ON;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create collection, item and mapping rule tables if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS collections (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            image_ref TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS items (
            id INTEGER PRIMARY KEY,
            collection_id INTEGER NOT NULL REFERENCES collections(id) ON DELETE CASCADE,
            package_id TEXT NOT NULL,
            serial TEXT NOT NULL,
            section TEXT,
            row_number INTEGER CHECK(row_number IS NULL OR row_number >= 1),
            column_number INTEGER CHECK(column_number IS NULL OR column_number >= 1),
            placed_at TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(collection_id, serial),
            CHECK(
                (placed_at IS NULL AND section IS NULL AND row_number IS NULL AND column_number IS NULL)
                OR (placed_at IS NOT NULL AND section IS NOT NULL AND row_number IS NOT NULL)
            )
        );

        CREATE TABLE IF NOT EXISTS mapping_rules (
            id INTEGER PRIMARY KEY,
            collection_id INTEGER NOT NULL REFERENCES collections(id) ON DELETE CASCADE,
            record_type TEXT NOT NULL,
            field_path TEXT NOT NULL,
            description TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_items_collection_id ON items(collection_id);
        CREATE INDEX IF NOT EXISTS idx_mapping_rules_collection_id ON mapping_rules(collection_id, id);

        CREATE UNIQUE INDEX IF NOT EXISTS uq_items_placement
        ON items(collection_id, section, row_number, column_number)
        WHERE placed_at IS NOT NULL;
        """
    )
