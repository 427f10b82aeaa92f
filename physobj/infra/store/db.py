from __future__ import annotations

import sqlite3
from pathlib import Path

SCHEMA_VERSION = 1

PHYSICAL_OBJECT_TYPE_TAXONOMY_ID = 52
HAS_PHYSICAL_OBJECT_RELATION_TYPE_ID = 147


def openDb(dbPath: str) -> sqlite3.Connection:
    """
    Открывает/создаёт SQLite БД с нужными PRAGMA/timeout.
    """
    if dbPath != ":memory:":
        Path(dbPath).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(dbPath, timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA busy_timeout = 5000")
    return conn


def ensureSchema(conn: sqlite3.Connection) -> int:
    """
    Создаёт таблицы/индексы при первом запуске и записывает schema_version.
    """
    _create_meta(conn)
    current_version = _get_schema_version(conn) or 0
    if current_version < SCHEMA_VERSION:
        _create_base_schema(conn)
        _set_schema_version(conn, SCHEMA_VERSION)
        conn.commit()
        return SCHEMA_VERSION
    return current_version


def _create_meta(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS meta (
            key TEXT PRIMARY KEY,
            value TEXT
        )
        """
    )


def _get_schema_version(conn: sqlite3.Connection) -> int | None:
    row = conn.execute("SELECT value FROM meta WHERE key='schema_version'").fetchone()
    if row is None:
        return None
    try:
        return int(row[0])
    except (TypeError, ValueError):
        return None


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    conn.execute(
        """
        INSERT INTO meta(key, value)
        VALUES (?, ?)
        ON CONFLICT(key) DO UPDATE SET value=excluded.value
        """,
        ("schema_version", str(version)),
    )


def _create_base_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS term (
            id INTEGER NOT NULL,
            taxonomy_id INTEGER NOT NULL,
            culture TEXT NOT NULL,
            name TEXT NOT NULL,
            PRIMARY KEY (id, culture)
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_term_taxonomy ON term(taxonomy_id)")
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS information_object (
            id INTEGER PRIMARY KEY,
            slug TEXT NOT NULL UNIQUE
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS physical_object (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            type_id INTEGER,
            location TEXT,
            culture TEXT NOT NULL,
            created_at TEXT
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS relation (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            subject_id INTEGER NOT NULL REFERENCES physical_object(id),
            object_id INTEGER NOT NULL,
            type_id INTEGER NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_relation_subject ON relation(subject_id)")
