from __future__ import annotations

import os
from pathlib import Path

from physobj.domain.error_codes import ErrorKind
from physobj.domain.exceptions import FileError


class CsvFormatError(Exception):
    """
    Назначение:
        Ошибка критического формата CSV (заголовок, количество колонок и т.п.).
    """


def validate_filename(path: str) -> str:
    """
    Назначение:
        Проверяет, что файл существует и доступен для чтения.

    Выходные данные:
        str: тот же путь.

    Поведение:
        - Нет файла -> FileError(FILE_NOT_FOUND).
        - Нет прав на чтение -> FileError(FILE_NOT_READABLE).
    """
    p = Path(path)
    if not p.exists() or not p.is_file():
        raise FileError(f"Can not find file {path}", path=str(path))
    if not os.access(p, os.R_OK):
        raise FileError(f"Can not read {path}", path=str(path), code=ErrorKind.FILE_NOT_READABLE)
    return str(path)


def validate_header(header: list[str] | None, required_any: tuple[str, ...] = ()) -> list[str]:
    """
    Назначение:
        Валидирует строку заголовка CSV.

    Поведение:
        - Нет заголовка, пустые или повторяющиеся имена колонок -> CsvFormatError.
        - required_any: хотя бы одна из колонок должна присутствовать.
    """
    if not header:
        raise CsvFormatError("Missing header in source CSV")
    names = [name.strip() for name in header]
    if any(name == "" for name in names):
        raise CsvFormatError(f"Empty column name in header: {header}")
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise CsvFormatError(f"Duplicate column names in header: {', '.join(duplicates)}")
    if required_any and not any(name in names for name in required_any):
        raise CsvFormatError(f"Header must contain at least one of: {', '.join(required_any)}")
    return names
