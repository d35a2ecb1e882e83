from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any

from viewfeed.domain.models import DefaultDatum


def datumToJson(datum: Any) -> Any:
    """
    Назначение:
        Приводит datum к JSON-совместимому виду.

    Алгоритм:
        - DefaultDatum -> список значений.
        - dataclass -> dict (dataclasses.asdict).
        - tuple -> список, dict/примитивы как есть.
    """
    if isinstance(datum, DefaultDatum):
        return list(datum.values)
    if dataclasses.is_dataclass(datum) and not isinstance(datum, type):
        return dataclasses.asdict(datum)
    if isinstance(datum, tuple):
        return list(datum)
    return datum


class JsonLinesFileView:
    """
    Назначение/ответственность:
        Представление, дописывающее каждый datum отдельной JSON-строкой в файл.
    Ограничения:
        Файл открывается на каждую вставку (append); повторный fetch дописывает строки повторно.
    """

    def __init__(self, path: str, truncate: bool = False) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if truncate:
            self.path.write_text("", encoding="utf-8")
        self.written = 0

    def insert(self, datum: Any) -> None:
        line = json.dumps(datumToJson(datum), ensure_ascii=False, default=str)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        self.written += 1
