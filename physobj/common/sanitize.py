def maskSecret(value: str | None) -> str | None:
    """
    Назначение:
        Маскирует секреты (API-ключ) для безопасного вывода в stdout/logs.
    """
    if value is None:
        return None
    return "***"


def truncateText(value: str | None, limit: int = 200) -> str | None:
    """
    Назначение:
        Ограничивает длину текста, чтобы не раздувать логи и отчёты.
    """
    if value is None:
        return None
    if len(value) <= limit:
        return value
    suffix = "..." if limit > 3 else ""
    return value[: limit - len(suffix)] + suffix
