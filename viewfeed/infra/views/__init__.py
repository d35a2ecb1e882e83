from viewfeed.infra.views.list_view import ListDataView
from viewfeed.infra.views.keyed_view import KeyedDataView
from viewfeed.infra.views.jsonl_view import JsonLinesFileView

__all__ = [
    "ListDataView",
    "KeyedDataView",
    "JsonLinesFileView",
]
