"""Record store contract.

The content graph never talks to a backend directly. Every read and write
goes through a ``RecordStore`` that hands out one ``RecordCollection`` per
backend collection. Records are plain dicts; every failure surfaces as
``StoreError``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

Record = dict[str, Any]


@runtime_checkable
class RecordCollection(Protocol):
    """Typed-record persistence API for one backend collection."""

    name: str

    async def list(self, sort: str | None = None) -> list[Record]:
        """List every record, optionally sorted by ``field`` or ``-field``."""
        ...

    async def find(self, filters: dict[str, Any], sort: str | None = None) -> list[Record]:
        """List records whose fields equal every filter value."""
        ...

    async def create(self, fields: dict[str, Any]) -> Record:
        """Create a record and return it with its generated id."""
        ...

    async def update(self, record_id: str, fields: dict[str, Any]) -> Record:
        """Update fields of one record and return the stored record."""
        ...

    async def delete(self, record_id: str) -> None:
        """Delete one record."""
        ...


@runtime_checkable
class RecordStore(Protocol):
    """Factory for record collections."""

    def collection(self, name: str) -> RecordCollection:
        """Return the accessor for a backend collection."""
        ...
