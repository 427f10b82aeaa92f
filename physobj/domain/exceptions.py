from __future__ import annotations

from dataclasses import dataclass

from physobj.domain.error_codes import ErrorKind, Severity
from physobj.errors import AppError


class FileError(AppError):
    """
    Назначение:
        Файл источника отсутствует или недоступен для чтения.
        Прерывает импорт до чтения первой строки.
    """

    def __init__(self, message: str, path: str, code: ErrorKind = ErrorKind.FILE_NOT_FOUND):
        super().__init__(category="file", code=code.value, message=message, details={"path": path})
        self.path = path


class ConfigurationError(AppError):
    """
    Назначение:
        Невыполнимое предусловие импорта (например, словарь типов пуст
        или недоступен). Прерывает импорт до чтения первой строки.
    """

    def __init__(
        self,
        message: str,
        code: ErrorKind = ErrorKind.VOCABULARY_UNAVAILABLE,
        details: dict | None = None,
    ):
        super().__init__(category="config", code=code.value, message=message, details=details or {})


@dataclass
class RowValidationError(Exception):
    """
    Назначение:
        Построчная ошибка валидации. Никогда не прерывает весь импорт.

    Инварианты/гарантии:
        - severity=FATAL выбрасывается из process_row, строка пропускается.
        - severity=WARNING прикрепляется к записи (PhysicalObjectRecord.warnings).
        - row_index заполняется на границе пайплайна; в process_row он None.
    """

    kind: ErrorKind
    message: str
    severity: Severity = Severity.FATAL
    row_index: int | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def at_row(self, row_index: int) -> "RowValidationError":
        return RowValidationError(
            kind=self.kind,
            message=self.message,
            severity=self.severity,
            row_index=row_index,
        )


__all__ = ["FileError", "ConfigurationError", "RowValidationError"]
