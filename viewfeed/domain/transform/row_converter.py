from __future__ import annotations

from typing import Any, Callable, Sequence, TypeVar

from viewfeed.domain.exceptions import RowConversionError
from viewfeed.domain.models import DefaultDatum

T = TypeVar("T")

RowConverter = Callable[[tuple], Any]


def datum_converter(datum_type: Callable[..., T]) -> Callable[[tuple], T]:
    """
    Назначение:
        Конвертер, применяющий конструктор datum'а к значениям строки по позиции.

    Входные данные:
        datum_type: Callable[..., T]
            Тип (или фабрика) datum'а; получает значения в порядке колонок.

    Выходные данные:
        Callable[[tuple], T]

    Ошибки:
        TypeError/ValueError конструктора (арность, типы) превращаются в RowConversionError.
    """

    def convert(row: tuple) -> T:
        try:
            return datum_type(*row)
        except (TypeError, ValueError) as exc:
            name = getattr(datum_type, "__name__", repr(datum_type))
            raise RowConversionError(f"Cannot convert row to {name}: {exc}", row=tuple(row)) from exc

    convert.datum_type = datum_type  # type: ignore[attr-defined]
    return convert


def named_converter(columns: Sequence[str], datum_type: Callable[..., T]) -> Callable[[tuple], T]:
    """
    Назначение:
        Конвертер по именам колонок: значения передаются в datum_type как kwargs.
    """
    names = tuple(columns)
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate column names: {names}")

    def convert(row: tuple) -> T:
        if len(row) != len(names):
            raise RowConversionError(
                f"Row arity mismatch: expected {len(names)} columns, got {len(row)}",
                row=tuple(row),
            )
        try:
            return datum_type(**dict(zip(names, row)))
        except (TypeError, ValueError) as exc:
            name = getattr(datum_type, "__name__", repr(datum_type))
            raise RowConversionError(f"Cannot convert row to {name}: {exc}", row=tuple(row)) from exc

    convert.datum_type = datum_type  # type: ignore[attr-defined]
    return convert


default_converter: RowConverter = datum_converter(DefaultDatum)


__all__ = ["RowConverter", "datum_converter", "named_converter", "default_converter"]
