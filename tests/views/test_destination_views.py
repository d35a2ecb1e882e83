from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from viewfeed.domain.models import DefaultDatum
from viewfeed.domain.ports.views import UpsertResult
from viewfeed.infra.views import JsonLinesFileView, KeyedDataView, ListDataView


@dataclass(frozen=True)
class Row:
    id: int
    name: str


def test_list_view_keeps_insert_order():
    view = ListDataView(name="v")
    view.insert(Row(2, "b"))
    view.insert(Row(1, "a"))

    assert view.items == [Row(2, "b"), Row(1, "a")]
    assert list(view) == view.items
    assert len(view) == 2
    assert "items=2" in repr(view)

    view.clear()
    assert len(view) == 0


def test_list_view_items_is_a_copy():
    view = ListDataView()
    view.insert(1)
    view.items.append(2)
    assert view.items == [1]


def test_keyed_view_upserts():
    view = KeyedDataView(key_fn=lambda r: r.id)

    assert view.insert(Row(1, "a")) == UpsertResult.INSERTED
    assert view.insert(Row(1, "a2")) == UpsertResult.UPDATED
    assert view.insert(Row(2, "b")) == UpsertResult.INSERTED

    assert view.count() == 2
    assert view.get(1) == Row(1, "a2")
    assert view.get(3, "missing") == "missing"
    assert 2 in view
    assert view.keys() == [1, 2]
    assert view.stats == {"inserted": 2, "updated": 1}

    view.clear()
    assert len(view) == 0
    assert view.stats == {"inserted": 0, "updated": 0}


def test_jsonl_view_writes_lines(tmp_path: Path):
    path = tmp_path / "out" / "rows.jsonl"
    view = JsonLinesFileView(str(path))
    view.insert(DefaultDatum(1, "a"))
    view.insert(Row(2, "b"))
    view.insert((3, "c"))
    view.insert({"id": 4})

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines == [[1, "a"], {"id": 2, "name": "b"}, [3, "c"], {"id": 4}]
    assert view.written == 4


def test_jsonl_view_truncate(tmp_path: Path):
    path = tmp_path / "rows.jsonl"
    path.write_text("old\n", encoding="utf-8")

    JsonLinesFileView(str(path), truncate=True).insert(DefaultDatum("x"))

    assert path.read_text(encoding="utf-8") == '["x"]\n'
