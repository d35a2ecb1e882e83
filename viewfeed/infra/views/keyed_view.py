from __future__ import annotations

from typing import Any, Callable, Generic, Hashable, TypeVar

from viewfeed.domain.ports.views import UpsertResult

T = TypeVar("T")


class KeyedDataView(Generic[T]):
    """
    Назначение/ответственность:
        In-memory кэш datum'ов по ключу: insert работает как upsert.
    Инварианты/гарантии:
        - Повторная вставка datum'а с тем же ключом заменяет значение (UPDATED),
          поэтому повторный fetch после сбоя не создаёт дублей.
        - stats считает inserted/updated за всё время жизни представления.
    """

    def __init__(self, key_fn: Callable[[T], Hashable], name: str = "keyed") -> None:
        self.name = name
        self.key_fn = key_fn
        self._data: dict[Hashable, T] = {}
        self.stats: dict[str, int] = {"inserted": 0, "updated": 0}

    def insert(self, datum: T) -> UpsertResult:
        key = self.key_fn(datum)
        if key in self._data:
            self._data[key] = datum
            self.stats["updated"] += 1
            return UpsertResult.UPDATED
        self._data[key] = datum
        self.stats["inserted"] += 1
        return UpsertResult.INSERTED

    def get(self, key: Hashable, default: Any = None) -> T | Any:
        return self._data.get(key, default)

    def keys(self) -> list[Hashable]:
        return list(self._data.keys())

    def count(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        self._data.clear()
        self.stats = {"inserted": 0, "updated": 0}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
