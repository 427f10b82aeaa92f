from __future__ import annotations

import logging
import sqlite3

from physobj.common.time import getUtcNowIso
from physobj.domain.models import PhysicalObjectRecord
from physobj.infra.store.db import HAS_PHYSICAL_OBJECT_RELATION_TYPE_ID


class SqlitePhysicalObjectSink:
    """
    Назначение/ответственность:
        Сохраняет нормализованные записи физических объектов в SQLite.

    Инварианты/гарантии:
        - Одна запись = одна транзакция (объект + связи с описаниями).
        - Ошибка БД откатывает только текущую запись; write возвращает False.
    """

    def __init__(self, conn: sqlite3.Connection, logger: logging.Logger | None = None) -> None:
        self.conn = conn
        self.logger = logger or logging.getLogger(__name__)
        self.last_id: int | None = None

    def write(self, record: PhysicalObjectRecord) -> bool:
        self.last_id = None
        try:
            with self.conn:
                cursor = self.conn.execute(
                    """
                    INSERT INTO physical_object(name, type_id, location, culture, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (record.name, record.type_id, record.location, record.culture, getUtcNowIso()),
                )
                object_id = int(cursor.lastrowid)
                self.conn.executemany(
                    "INSERT INTO relation(subject_id, object_id, type_id) VALUES (?, ?, ?)",
                    [
                        (object_id, io_id, HAS_PHYSICAL_OBJECT_RELATION_TYPE_ID)
                        for io_id in record.information_object_ids
                    ],
                )
        except sqlite3.Error as exc:
            self.logger.error("Failed to save physical object \"%s\": %s", record.name, exc)
            return False
        self.last_id = object_id
        return True


class NullSink:
    """
    Приёмник для режима проверки: ничего не сохраняет.
    """

    def __init__(self) -> None:
        self.records: list[PhysicalObjectRecord] = []

    def write(self, record: PhysicalObjectRecord) -> bool:
        self.records.append(record)
        return True
