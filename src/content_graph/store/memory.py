"""Dict-backed record store.

Used by the test-suite and for offline experiments. Behaves like the REST
backend: generated string ids, ISO ``created_date`` timestamps, ``-field``
sorting and equality filters. Failures can be injected per collection,
operation and record id to exercise the degradation paths.

Example:
    store = InMemoryRecordStore({"word": [{"id": "1", "word": "כלב"}]})
    store.fail_on("contentrelationship", "find")
    records = await store.collection("word").list()
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any

import structlog

from content_graph.exceptions import StoreError
from content_graph.store.base import Record

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoreCall:
    """One recorded store call."""

    collection: str
    operation: str
    record_id: str | None = None


@dataclass(frozen=True)
class _FailureRule:
    collection: str
    operation: str
    record_id: str | None
    message: str

    def matches(self, call: StoreCall) -> bool:
        if (self.collection, self.operation) != (call.collection, call.operation):
            return False
        return self.record_id is None or self.record_id == call.record_id


def _sort_key(field: str):
    def key(record: Record) -> tuple[bool, str]:
        value = record.get(field)
        return (value is None, "" if value is None else str(value))

    return key


class InMemoryCollection:
    """One collection of an ``InMemoryRecordStore``."""

    def __init__(self, store: InMemoryRecordStore, name: str) -> None:
        self.name = name
        self._store = store
        self._records: dict[str, Record] = {}

    def _seed(self, record: Record) -> None:
        row = copy.deepcopy(record)
        row["id"] = str(row.get("id") or self._store.next_id())
        row.setdefault("created_date", self._store.next_timestamp())
        self._records[row["id"]] = row

    @staticmethod
    def _sorted(records: list[Record], sort: str | None) -> list[Record]:
        if not sort:
            return records
        field = sort.lstrip("-")
        return sorted(records, key=_sort_key(field), reverse=sort.startswith("-"))

    async def list(self, sort: str | None = None) -> list[Record]:
        self._store.record_call(self.name, "list")
        rows = [copy.deepcopy(r) for r in self._records.values()]
        return self._sorted(rows, sort)

    async def find(self, filters: dict[str, Any], sort: str | None = None) -> list[Record]:
        self._store.record_call(self.name, "find")
        wanted = {key: str(value) for key, value in filters.items()}
        rows = [
            copy.deepcopy(r)
            for r in self._records.values()
            if all(str(r.get(key)) == value for key, value in wanted.items())
        ]
        return self._sorted(rows, sort)

    async def create(self, fields: dict[str, Any]) -> Record:
        self._store.record_call(self.name, "create")
        row = copy.deepcopy(fields)
        row["id"] = self._store.next_id()
        row["created_date"] = self._store.next_timestamp()
        self._records[row["id"]] = row
        return copy.deepcopy(row)

    async def update(self, record_id: str, fields: dict[str, Any]) -> Record:
        record_id = str(record_id)
        self._store.record_call(self.name, "update", record_id)
        if record_id not in self._records:
            raise StoreError(self.name, "update", f"record {record_id} not found")
        self._records[record_id].update(copy.deepcopy(fields))
        return copy.deepcopy(self._records[record_id])

    async def delete(self, record_id: str) -> None:
        record_id = str(record_id)
        self._store.record_call(self.name, "delete", record_id)
        if self._records.pop(record_id, None) is None:
            raise StoreError(self.name, "delete", f"record {record_id} not found")

    def __len__(self) -> int:
        return len(self._records)


class InMemoryRecordStore:
    """Record store holding every collection in process memory.

    Attributes:
        calls: Every call made through the store, in order.
    """

    def __init__(self, seed: dict[str, list[Record]] | None = None) -> None:
        """Initialize the store.

        Args:
            seed: Optional initial records keyed by collection name. Records
                without an id or created_date get generated ones.
        """
        self._collections: dict[str, InMemoryCollection] = {}
        self._ids = count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._failures: list[_FailureRule] = []
        self.calls: list[StoreCall] = []
        for name, records in (seed or {}).items():
            for record in records:
                self.collection(name)._seed(record)

    def collection(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(self, name)
        return self._collections[name]

    def next_id(self) -> str:
        return str(next(self._ids))

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def fail_on(
        self,
        collection: str,
        operation: str,
        record_id: str | None = None,
        message: str = "simulated outage",
    ) -> None:
        """Make matching calls raise ``StoreError`` until ``clear_failures``.

        Args:
            collection: Collection name.
            operation: One of list, find, create, update, delete.
            record_id: Restrict the failure to one record (update/delete only).
            message: Error message carried by the raised StoreError.
        """
        self._failures.append(_FailureRule(collection, operation, record_id, message))

    def clear_failures(self) -> None:
        self._failures.clear()

    def record_call(self, collection: str, operation: str, record_id: str | None = None) -> None:
        """Log a call and raise if an injected failure matches it.

        Raises:
            StoreError: If a failure rule matches the call.
        """
        call = StoreCall(collection, operation, record_id)
        self.calls.append(call)
        for rule in self._failures:
            if rule.matches(call):
                logger.debug("Injected store failure", collection=collection, operation=operation)
                raise StoreError(collection, operation, rule.message)

    def calls_for(self, operation: str, collection: str | None = None) -> list[StoreCall]:
        """Recorded calls filtered by operation and optionally collection."""
        return [
            c
            for c in self.calls
            if c.operation == operation and (collection is None or c.collection == collection)
        ]
