from __future__ import annotations

from typing import Sequence

from viewfeed.domain.exceptions import ContractViolation
from viewfeed.domain.ports.views import DestinationView


class DataSource:
    """
    Назначение/ответственность:
        Абстрактный источник данных, раскладывающий сырые строки по DestinationView.

    [Обязательные методы]
        fetch(): выбирает данные, вставляет их во все представления и
        возвращает эти представления.
    """

    def fetch(self) -> Sequence[DestinationView]:
        raise ContractViolation("fetch", type(self).__name__)


__all__ = ["DataSource"]
