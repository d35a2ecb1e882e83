SECRET_MASK = "***"


def maskSecret(value: str | None) -> str | None:
    """
    Назначение:
        Маскирует секреты (пароль БД) для безопасного вывода в stdout/logs.

    Выходные данные:
        str | None
            '***' для заданного значения (включая пустую строку), иначе None.
    """
    if value is None:
        return None
    return SECRET_MASK


def truncateText(value: str | None, limit: int = 200) -> str | None:
    """
    Назначение:
        Ограничивает длину текста (например, SQL-запроса в логе).
    """
    if value is None:
        return None
    if len(value) <= limit:
        return value
    suffix = "..." if limit > 3 else ""
    return value[: limit - len(suffix)] + suffix
