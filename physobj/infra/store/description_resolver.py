from __future__ import annotations

import sqlite3


class SqliteDescriptionResolver:
    """
    Назначение:
        Поиск id архивного описания по slug в локальной БД.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def resolve(self, slug: str) -> int | None:
        row = self.conn.execute("SELECT id FROM information_object WHERE slug = ?", (slug,)).fetchone()
        if row is None:
            return None
        return int(row["id"])
