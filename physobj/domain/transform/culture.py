from __future__ import annotations

from physobj.domain.error_codes import ErrorKind
from physobj.domain.exceptions import RowValidationError


def _clean(value: str | None) -> str:
    if value is None:
        return ""
    return value.strip()


def resolve_culture(
    explicit: str | None,
    default_culture: str | None = None,
    process_default_culture: str | None = None,
) -> str:
    """
    Назначение:
        Определяет культуру строки.

    Алгоритм:
        explicit -> default_culture (настройка импорта) -> process_default_culture
        (настройка приложения). Первое непустое значение приводится к нижнему
        регистру. Если все пусты, выбрасывается UNDETERMINED_CULTURE.
    """
    for candidate in (explicit, default_culture, process_default_culture):
        cleaned = _clean(candidate)
        if cleaned:
            return cleaned.lower()
    raise RowValidationError(
        kind=ErrorKind.UNDETERMINED_CULTURE,
        message="Couldn't determine row culture",
    )
