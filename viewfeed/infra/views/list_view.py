from __future__ import annotations

from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class ListDataView(Generic[T]):
    """
    Назначение/ответственность:
        In-memory представление: хранит datum'ы в порядке вставки.
    """

    def __init__(self, name: str = "list") -> None:
        self.name = name
        self._items: list[T] = []

    def insert(self, datum: T) -> None:
        self._items.append(datum)

    @property
    def items(self) -> list[T]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"ListDataView(name={self.name!r}, items={len(self._items)})"
