from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """
    Назначение:
        Уровень серьёзности построчной ошибки.

    Инварианты:
        - FATAL: строка пропускается целиком, запись не создаётся.
        - WARNING: запись создаётся с неполными данными, проблема логируется.
    """

    FATAL = "fatal"
    WARNING = "warning"


class ErrorKind(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок импорта.
    """

    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    UNDETERMINED_CULTURE = "UNDETERMINED_CULTURE"
    UNKNOWN_TYPE = "UNKNOWN_TYPE"
    UNKNOWN_DESCRIPTION = "UNKNOWN_DESCRIPTION"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_NOT_READABLE = "FILE_NOT_READABLE"
    VOCABULARY_UNAVAILABLE = "VOCABULARY_UNAVAILABLE"
    VOCABULARY_CONFLICT = "VOCABULARY_CONFLICT"
    SINK_ERROR = "SINK_ERROR"
