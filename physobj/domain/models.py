from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from physobj.domain.exceptions import RowValidationError


@dataclass(frozen=True)
class PhysicalObjectRecord:
    """
    Назначение:
        Нормализованная запись физического объекта, готовая к сохранению.

    Инварианты:
        - culture всегда в нижнем регистре.
        - location равен None, если после trim значение пустое.
        - type_id равен None, если тип не указан.
        - information_object_ids сохраняют порядок из файла.
        - warnings содержат только ошибки уровня WARNING.
    """

    name: str
    location: str | None
    culture: str
    type_id: int | None = None
    information_object_ids: tuple[int, ...] = ()
    warnings: tuple[RowValidationError, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "location": self.location,
            "culture": self.culture,
            "type_id": self.type_id,
            "information_object_ids": list(self.information_object_ids),
        }


@dataclass(frozen=True)
class Term:
    """
    Термин контролируемого словаря (например, тип физического объекта).
    """

    id: int
    culture: str
    name: str


@dataclass(frozen=True)
class RowRef:
    """
    Назначение:
        Унифицированная ссылка на строку входного набора для логов и отчётов.
    """

    row_index: int
    line_no: int
    row_id: str


@dataclass
class RowOutcome:
    """
    Назначение:
        Результат обработки одной строки: либо запись, либо фатальная ошибка.
    """

    row_ref: RowRef
    values: Mapping[str, str]
    record: PhysicalObjectRecord | None = None
    error: RowValidationError | None = None

    @property
    def row_index(self) -> int:
        return self.row_ref.row_index

    @property
    def ok(self) -> bool:
        return self.record is not None

    @property
    def warnings(self) -> tuple[RowValidationError, ...]:
        if self.record is None:
            return ()
        return self.record.warnings


@dataclass
class ImportSummary:
    """
    Назначение:
        Сводные счётчики запуска импорта.

    Поля:
        rows_total: строк данных прочитано
        rows_processed: записей создано и сохранено
        rows_skipped: строк пропущено из-за фатальной ошибки валидации
        rows_failed: строк, которые отклонил приёмник (sink)
        rows_with_warnings: сохранённых строк с предупреждениями
    """

    rows_total: int = 0
    rows_processed: int = 0
    rows_skipped: int = 0
    rows_failed: int = 0
    rows_with_warnings: int = 0
    skipped_rows: list[int] = field(default_factory=list)


@dataclass
class ImportRun:
    """
    Назначение:
        Контекст одного запуска импорта. Не сохраняется.
    """

    run_id: str
    source_path: str
    header: list[str] | None = None
    rows_expected: int | None = None
    summary: ImportSummary = field(default_factory=ImportSummary)
