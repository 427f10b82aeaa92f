from __future__ import annotations

from typing import Protocol, runtime_checkable

from physobj.domain.models import PhysicalObjectRecord


@runtime_checkable
class RecordSinkProtocol(Protocol):
    """
    Назначение:
        Приёмник нормализованных записей (сохранение делегируется вызывающему).

    Контракт:
        - write(record) -> bool
            True при успешной атомарной записи, False при отказе.
            Запись одной строки не зависит от остальных.
    """

    def write(self, record: PhysicalObjectRecord) -> bool: ...
