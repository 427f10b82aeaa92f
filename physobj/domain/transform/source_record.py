from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class SourceRecord:
    """
    Назначение:
        Сырая строка источника: имя колонки -> строковое значение.

    Поля:
        row_index: порядковый номер строки данных (с 1, заголовок не считается)
        line_no: номер физической строки файла, с которой начинается запись
        values: значения в порядке заголовка
    """

    row_index: int
    line_no: int
    values: Mapping[str, str]

    @property
    def record_id(self) -> str:
        return f"line:{self.line_no}"
