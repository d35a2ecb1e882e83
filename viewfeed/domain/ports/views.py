from __future__ import annotations

from enum import Enum
from typing import Protocol, TypeVar

D_contra = TypeVar("D_contra", contravariant=True)


class UpsertResult(str, Enum):
    """
    Назначение:
        Результат вставки в представление с ключом.
    """

    INSERTED = "inserted"
    UPDATED = "updated"


class DestinationView(Protocol[D_contra]):
    """
    Назначение/ответственность:
        Внешний контейнер/кэш, принимающий datum'ы от источника.
    Взаимодействия:
        Источник вызывает insert для каждой строки, во всех представлениях по порядку.
    Ограничения:
        Идемпотентность повторной вставки (после повторного fetch): забота представления.
    """

    def insert(self, datum: D_contra) -> object:
        """
        Контракт:
            Вход: datum, полученный конвертером строки.
            Выход: не специфицирован (успех или исключение).
        """
        ...


__all__ = ["DestinationView", "UpsertResult"]
