"""Record store contract and implementations.

This package contains:
- RecordStore / RecordCollection protocols
- InMemoryRecordStore: dict-backed store with failure injection
- HttpRecordStore: httpx client for the content REST backend
"""

from content_graph.store.base import Record, RecordCollection, RecordStore
from content_graph.store.http import HttpCollection, HttpRecordStore, StoreConfig
from content_graph.store.memory import InMemoryCollection, InMemoryRecordStore, StoreCall

__all__ = [
    "Record",
    "RecordCollection",
    "RecordStore",
    "HttpCollection",
    "HttpRecordStore",
    "StoreConfig",
    "InMemoryCollection",
    "InMemoryRecordStore",
    "StoreCall",
]
