from __future__ import annotations

DEFAULT_MULTI_VALUE_DELIMITER = "|"


def validate_delimiter(delimiter: str) -> str:
    """
    Назначение:
        Проверяет, что разделитель мультизначений состоит ровно из одного символа.
    """
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ValueError(f"Multi-value delimiter must be a single character, got {delimiter!r}")
    return delimiter


def split_multi_value(value: str | None, delimiter: str = DEFAULT_MULTI_VALUE_DELIMITER) -> list[str]:
    """
    Назначение:
        Разбивает значение мультиколонки на части.

    Алгоритм:
        - Пустое (после trim) значение -> [].
        - split по разделителю, trim каждой части, пустые части отбрасываются.
        - Порядок частей сохраняется.

    Пример:
        "a | b|  |c" -> ["a", "b", "c"]
    """
    if value is None or value.strip() == "":
        return []
    parts = (part.strip() for part in value.split(delimiter))
    return [part for part in parts if part != ""]
