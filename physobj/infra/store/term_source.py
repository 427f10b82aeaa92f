from __future__ import annotations

import sqlite3

from physobj.domain.exceptions import ConfigurationError
from physobj.domain.models import Term
from physobj.infra.store.db import PHYSICAL_OBJECT_TYPE_TAXONOMY_ID


class SqliteTermSource:
    """
    Назначение:
        Читает термины таксономии типов физических объектов из SQLite.
    """

    def __init__(self, conn: sqlite3.Connection, taxonomy_id: int = PHYSICAL_OBJECT_TYPE_TAXONOMY_ID) -> None:
        self.conn = conn
        self.taxonomy_id = taxonomy_id

    def list_terms(self) -> list[Term]:
        try:
            rows = self.conn.execute(
                "SELECT id, culture, name FROM term WHERE taxonomy_id = ? ORDER BY id, culture",
                (self.taxonomy_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise ConfigurationError(f"Couldn't load physical object type terms from database: {exc}") from exc
        return [Term(id=int(row["id"]), culture=row["culture"], name=row["name"]) for row in rows]

    def add_term(self, term_id: int, culture: str, name: str) -> None:
        self.conn.execute(
            """
            INSERT INTO term(id, taxonomy_id, culture, name)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id, culture) DO UPDATE SET name=excluded.name
            """,
            (term_id, self.taxonomy_id, culture, name),
        )
